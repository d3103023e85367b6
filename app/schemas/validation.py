"""
레코드 검증 결과 (tagged variant).

- Valid: 검증 통과, record 에 파싱된 모델
- Invalid: 위반 목록 (필드 경로 + 제약 종류 + 메시지)
- Written: 저장소 쓰기 성공. 쓰기 결과는 Written | Invalid
"""

from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ValidationError

RecordT = TypeVar("RecordT", bound=BaseModel)


class Violation(BaseModel):
    field: str
    constraint: str
    message: str


class Valid(BaseModel, Generic[RecordT]):
    status: Literal["valid"] = "valid"
    record: RecordT

    @property
    def ok(self) -> bool:
        return True


class Invalid(BaseModel):
    status: Literal["invalid"] = "invalid"
    violations: list[Violation]

    @property
    def ok(self) -> bool:
        return False

    def has_violation(self, field: str, constraint: str | None = None) -> bool:
        return any(
            v.field == field and (constraint is None or v.constraint == constraint)
            for v in self.violations
        )


class Written(BaseModel):
    """저장 성공 (insert_one 결과 id)."""

    status: Literal["written"] = "written"
    inserted_id: str

    @property
    def ok(self) -> bool:
        return True


ValidationResult = Union[Valid, Invalid]
WriteResult = Union[Written, Invalid]


def violations_from_error(exc: ValidationError) -> list[Violation]:
    return [
        Violation(
            field=".".join(str(part) for part in err["loc"]) or "__root__",
            constraint=err["type"],
            message=err["msg"],
        )
        for err in exc.errors()
    ]


def validate_record(model: type[RecordT], payload: Any) -> ValidationResult:
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    try:
        record = model.model_validate(payload)
    except ValidationError as e:
        return Invalid(violations=violations_from_error(e))
    return Valid[model](record=record)
