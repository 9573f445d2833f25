from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict, Field
from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated

from .errors import InvalidObjectIdError


def ensure_utc_datetime(value: datetime) -> datetime:
    """datetime 값을 UTC 기준으로 정규화한다.

    - tzinfo 가 없으면 UTC 로 간주해 tzinfo=UTC 를 부여 (pymongo 는 기본적으로 naive 로 돌려준다)
    - tzinfo 가 있으면 UTC 로 변환
    """

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_object_id(value: Any) -> ObjectId:
    """str/ObjectId 값을 MongoDB ObjectId 로 변환한다.

    형식이 맞지 않으면 InvalidObjectIdError 를 발생시켜, 호출 측이
    "잘못된 식별자" 와 "저장소 장애" 를 구분할 수 있게 한다.
    """

    if isinstance(value, ObjectId):
        return value
    if value is None:
        raise InvalidObjectIdError(value)
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError) as exc:
        raise InvalidObjectIdError(value) from exc


def from_object_id(value: Optional[ObjectId]) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def new_object_id() -> ObjectId:
    return ObjectId()


PyObjectId = Annotated[ObjectId, BeforeValidator(to_object_id)]
MongoDateTime = Annotated[datetime, BeforeValidator(ensure_utc_datetime)]


class EmbeddedDocument(BaseModel):
    """도큐먼트 안에 포함되는 서브 도큐먼트용 베이스 모델."""

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)


class BaseDocument(EmbeddedDocument):
    """MongoDB 최상위 도큐먼트용 공통 베이스 모델.

    - _id 는 id 필드로 노출하고, 저장 시 by_alias 로 다시 _id 로 돌려놓는다.
    """

    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    created_at: MongoDateTime
    updated_at: MongoDateTime

    def to_mongo_record(self) -> dict[str, Any]:
        """MongoDB 저장에 사용할 레코드(dict) 직렬화.

        - by_alias=True 로 id -> _id 등의 Mongo 필드 이름과 일치시킨다.
        - exclude_none=True 로 _id=None 을 제거해 Mongo 가 ObjectId 를 생성하도록 한다.
        """

        return self.model_dump(by_alias=True, exclude_none=True)
