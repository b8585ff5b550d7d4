from __future__ import annotations

from pydantic import BaseModel, Field

from common.types.datetime import UtcDateTime


class Post(BaseModel):
    """게시글 도메인 모델 (API/저장소에서 공통 사용)

    - id 와 created_at 은 저장 시점에 채워지며 이후 변경되지 않는다.
    - owner_id 는 익명 모드에서 생성된 포스트라면 None 이다.
    - version 은 낙관적 동시성 제어용 토큰으로, 저장소가 갱신할 때마다 1씩 증가한다.
    """

    id: int | None = Field(default=None)
    title: str
    body: str
    created_at: UtcDateTime | None = Field(default=None)
    owner_id: str | None = Field(default=None)
    owner_name: str | None = Field(default=None)
    version: int = Field(default=0)


class ListPostsFilter(BaseModel):
    """포스트 검색 옵션 (제목/본문 부분 문자열, 대소문자 무시)"""

    title: str | None = None
    content: str | None = None

    def normalized(self) -> "ListPostsFilter":
        """공백뿐인 조건만 None 으로 바꾼 사본을 반환한다. 나머지 값은 앞뒤 공백까지 그대로 둔다."""

        title = self.title if self.title and self.title.strip() else None
        content = self.content if self.content and self.content.strip() else None
        return ListPostsFilter(title=title, content=content)
