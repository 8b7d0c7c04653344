import re
from typing import Optional, List, Any, Iterable

from beanie import PydanticObjectId
from bson.errors import InvalidId

from .errors import ValidationException, ValidationError


class Validator:
    """입력 검증을 위한 유틸리티 클래스"""

    @staticmethod
    def validate_string_length(
        value: str,
        field_name: str,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None
    ) -> str:
        """문자열 길이 검증"""
        errors = []

        if min_length and len(value) < min_length:
            errors.append(
                ValidationError(
                    field=field_name,
                    message=f"Must be at least {min_length} characters long",
                    value=len(value)
                )
            )

        if max_length and len(value) > max_length:
            errors.append(
                ValidationError(
                    field=field_name,
                    message=f"Must be no more than {max_length} characters long",
                    value=len(value)
                )
            )

        if errors:
            raise ValidationException(
                f"{field_name} length validation failed",
                validation_errors=errors
            )

        return value

    @staticmethod
    def validate_object_id(value: Any, field_name: str) -> PydanticObjectId:
        """MongoDB ObjectId 형식 검증"""
        try:
            return PydanticObjectId(str(value))
        except (InvalidId, TypeError, ValueError):
            raise ValidationException(
                f"{field_name} must be a valid identifier",
                validation_errors=[
                    ValidationError(
                        field=field_name,
                        message="Must be a 24-character hex ObjectId",
                        value=value
                    )
                ]
            )

    @staticmethod
    def validate_object_ids(values: Iterable[Any], field_name: str) -> List[PydanticObjectId]:
        """ObjectId 목록 검증 (중복 제거, 순서 유지)"""
        result: List[PydanticObjectId] = []
        for index, value in enumerate(values):
            object_id = Validator.validate_object_id(value, f"{field_name}[{index}]")
            if object_id not in result:
                result.append(object_id)
        return result

    @staticmethod
    def validate_multiple_fields(validations: List[callable]) -> List[Any]:
        """여러 필드 동시 검증"""
        errors = []
        results = []

        for validation_func in validations:
            try:
                results.append(validation_func())
            except ValidationException as e:
                errors.extend(e.validation_errors)

        if errors:
            raise ValidationException(
                "Multiple validation errors",
                validation_errors=errors
            )

        return results

    @staticmethod
    def validate_message_content(content: str, field_name: str = "content") -> str:
        """메시지 내용 검증"""
        errors = []

        if not content or content.strip() == "":
            errors.append(
                ValidationError(
                    field=field_name,
                    message="Message content cannot be empty"
                )
            )
        elif len(content) > 5000:
            errors.append(
                ValidationError(
                    field=field_name,
                    message="Message content must be no more than 5000 characters",
                    value=len(content)
                )
            )

        # 제어 문자 검증
        if content and re.search(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', content):
            errors.append(
                ValidationError(
                    field=field_name,
                    message="Message content contains invalid control characters"
                )
            )

        if errors:
            raise ValidationException(
                "Message content validation failed",
                validation_errors=errors
            )

        return content

    @staticmethod
    def validate_search_query(query: Optional[str], field_name: str = "query") -> str:
        """검색 쿼리 검증"""
        if query is None or len(query.strip()) < 1:
            raise ValidationException(
                "Search query validation failed",
                validation_errors=[
                    ValidationError(
                        field=field_name,
                        message="Search query must be at least 1 character long"
                    )
                ]
            )

        if len(query) > 100:
            raise ValidationException(
                "Search query validation failed",
                validation_errors=[
                    ValidationError(
                        field=field_name,
                        message="Search query must be no more than 100 characters",
                        value=len(query)
                    )
                ]
            )

        return query.strip()

    @staticmethod
    def validate_pagination(page: int, limit: int, max_limit: int = 100) -> tuple[int, int]:
        """페이지네이션 파라미터 검증"""
        errors = []

        if page < 1:
            errors.append(
                ValidationError(
                    field="page",
                    message="Page must be 1 or greater",
                    value=page
                )
            )

        if limit <= 0:
            errors.append(
                ValidationError(
                    field="limit",
                    message="Limit must be greater than 0",
                    value=limit
                )
            )
        elif limit > max_limit:
            errors.append(
                ValidationError(
                    field="limit",
                    message=f"Limit must be no more than {max_limit}",
                    value=limit
                )
            )

        if errors:
            raise ValidationException(
                "Pagination validation failed",
                validation_errors=errors
            )

        return page, limit


# 편의 함수들
def validate_chat_creation(name: Optional[str], participants: Optional[List[Any]]):
    """채팅방 생성 데이터 검증"""
    validator = Validator()

    validations = [
        lambda: validator.validate_string_length(name, "name", max_length=255) if name else name,
        lambda: validator.validate_object_ids(participants or [], "participants"),
    ]

    return validator.validate_multiple_fields(validations)


def validate_message_creation(chat_id: Any, content: str):
    """메시지 생성 데이터 검증"""
    validator = Validator()

    validations = [
        lambda: validator.validate_object_id(chat_id, "chat"),
        lambda: validator.validate_message_content(content),
    ]

    return validator.validate_multiple_fields(validations)
