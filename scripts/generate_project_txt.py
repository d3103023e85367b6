"""
프로젝트 폴더를 재귀적으로 순회하며 포함 대상 파일을 하나의 텍스트 파일로 합칩니다.
외부 리뷰어(또는 LLM)에게 프로젝트 전체를 공유할 때 사용.

사용법 (합칠 프로젝트 루트에서):
  python scripts/generate_project_txt.py
  또는 설치 후: project-snapshot
"""
import json
import logging
import sys
import tomllib
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

OUTPUT_FILE = "project-content.txt"
SEPARATOR = "=" * 80

EXCLUDED_DIRS = [
    "node_modules",
    ".astro",
    ".git",
    "dist",
    "build",
    ".next",
    ".nuxt",
    ".cache",
    "coverage",
    ".vscode",
    ".idea",
    "public",
    "tmp",
    "temp",
    "logs",
    "__pycache__",
    ".venv",
    "venv",
    ".pytest_cache",
    ".mypy_cache",
]
EXCLUDED_FILES = [
    "package-lock.json",
    "yarn.lock",
    ".DS_Store",
    OUTPUT_FILE,
    ".env",
    ".env.local",
    ".env.production",
    ".env.example",
    "generate_project_txt.py",
]
INCLUDED_EXTENSIONS = [
    ".js", ".jsx", ".ts", ".tsx",
    ".vue", ".svelte", ".astro",
    ".html", ".css", ".scss", ".less",
    ".json", ".md", ".txt", ".mdx",
    ".py", ".java", ".cpp", ".c", ".cs",
    ".php", ".rb", ".go", ".rs",
    ".sql", ".graphql", ".gql",
    ".yml", ".yaml", ".toml",
    ".xml", ".svg",
]


def should_include_file(path: Path) -> bool:
    # 확장자가 없는 파일(Dockerfile 등)은 포함
    if path.name in EXCLUDED_FILES:
        return False
    ext = path.suffix.lower()
    return ext == "" or ext in INCLUDED_EXTENSIONS


def is_excluded_dir(path: Path) -> bool:
    return path.name in EXCLUDED_DIRS


def file_header(relative_path: str) -> list[str]:
    return [f"\n{SEPARATOR}\n", f"FILE: {relative_path}\n", f"{SEPARATOR}\n\n"]


def traverse_directory(dir_path: Path, output_lines: list[str], relative_path: str = "") -> int:
    """
    dir_path 아래 포함 대상 파일을 output_lines 에 추가하고 추가한 파일 수를 반환.
    파일 읽기 실패는 [ERROR: ...] 표시로 남기고, 접근할 수 없는 디렉터리/항목은 경고 후 건너뜀.
    """
    try:
        entries = sorted(dir_path.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.warning("디렉터리를 읽을 수 없습니다 %s: %s", dir_path, e)
        return 0

    count = 0
    for entry in entries:
        relative_item = f"{relative_path}/{entry.name}" if relative_path else entry.name
        try:
            is_dir = entry.is_dir()
            is_file = entry.is_file()
        except OSError as e:
            logger.warning("접근할 수 없습니다 %s: %s", entry, e)
            continue

        if is_dir:
            if not is_excluded_dir(entry):
                count += traverse_directory(entry, output_lines, relative_item)
        elif is_file and should_include_file(entry):
            output_lines.extend(file_header(relative_item))
            count += 1
            try:
                content = entry.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                output_lines.append(f"[ERROR: Could not read file - {e}]\n")
                continue
            output_lines.append(content)
            output_lines.append("\n")
    return count


def read_project_info(start_dir: Path) -> dict:
    """package.json 또는 pyproject.toml 에서 이름/설명/버전 (없으면 빈 dict)."""
    package_json = start_dir / "package.json"
    pyproject = start_dir / "pyproject.toml"
    try:
        if package_json.exists():
            info = json.loads(package_json.read_text(encoding="utf-8"))
        elif pyproject.exists():
            with pyproject.open("rb") as f:
                info = tomllib.load(f).get("project")
        else:
            return {}
    except (OSError, ValueError) as e:
        logger.debug("프로젝트 정보 파싱 실패: %s", e)
        return {}
    # 객체가 아닌 JSON(배열, 문자열 등)은 정보 없음으로 취급
    return info if isinstance(info, dict) else {}


def project_summary(start_dir: Path) -> list[str]:
    lines = [
        f"{SEPARATOR}\n",
        "PROJECT CONTENT\n",
        f"{SEPARATOR}\n",
        "\n",
        f"Root directory: {start_dir}\n",
        f"Generated at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n",
    ]
    info = read_project_info(start_dir)
    if info:
        lines.append(f"Name: {info.get('name') or 'not specified'}\n")
        lines.append(f"Description: {info.get('description') or 'not specified'}\n")
        lines.append(f"Version: {info.get('version') or 'not specified'}\n")
    return lines


def generate(start_dir: Path) -> tuple[list[str], int]:
    output_lines = project_summary(start_dir)
    file_count = traverse_directory(start_dir, output_lines)
    return output_lines, file_count


def main(start_dir: Path | None = None, output_file: str = OUTPUT_FILE) -> int:
    start_dir = Path(start_dir or Path.cwd())
    output_path = Path(output_file)
    if not output_path.is_absolute():
        output_path = Path.cwd() / output_path

    print("프로젝트 파일 생성 시작...")
    print(f"디렉터리: {start_dir}")
    print(f"제외 파일: {', '.join(EXCLUDED_FILES)}")
    print(f"제외 디렉터리: {', '.join(EXCLUDED_DIRS)}")

    output_lines, file_count = generate(start_dir)
    text = "".join(output_lines)
    try:
        output_path.write_text(text, encoding="utf-8")
    except OSError as e:
        print(f"오류: 파일을 쓸 수 없습니다 - {e}", file=sys.stderr)
        return 1

    line_count = text.count("\n")
    print(f"\n생성 완료: {output_path}")
    print(f"크기: {len(text.encode('utf-8')) / 1024:.2f} KB")
    print(f"라인 수: {line_count}")
    print(f"포함된 파일: {file_count}")
    print("\n미리보기 (앞 15줄):")
    print("".join(text.splitlines(keepends=True)[:15]))
    print("...\n")
    print("공유 전에 꼭 확인하세요: 자격 증명, API 키, 토큰, 개인 정보")
    print(f'  grep -i "password\\|secret\\|key\\|token\\|api" {output_path.name} | head -20')
    return 0


def cli() -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    return main()


if __name__ == "__main__":
    sys.exit(cli())
