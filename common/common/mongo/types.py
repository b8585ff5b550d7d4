from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.functional_validators import BeforeValidator

from common.types.datetime import ensure_utc


MongoDateTime = Annotated[datetime, BeforeValidator(ensure_utc)]


class BaseDocument(BaseModel):
    """MongoDB 도큐먼트용 공통 베이스 모델.

    - 정수 시퀀스 id 를 Mongo 의 _id 로 저장한다.
    - alias 기반 직렬화(by_alias)를 사용할 수 있도록 한다.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = Field(default=None, alias="_id")
    created_at: MongoDateTime

    def to_mongo_record(self) -> dict[str, Any]:
        """MongoDB 저장용 dict.

        - by_alias=True 로 id -> _id 필드 이름을 맞춘다.
        - exclude_none=True 로 값이 없는 선택 필드는 저장하지 않는다.
        """

        return self.model_dump(by_alias=True, exclude_none=True)
