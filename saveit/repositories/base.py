from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Query, Session

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseRepository(Generic[T, SchemaType]):
    """
    리포지토리 베이스 - 외부로는 Pydantic 스키마, 서비스 내부로는 ORM 인스턴스

    쓰기 메서드는 commit=False 로 호출하면 flush 까지만 수행합니다.
    잔액 변경, 거래 기록, 스트릭 로그처럼 함께 성공하거나 함께 실패해야 하는 작업은
    서비스가 한 번에 commit / rollback 합니다.
    """

    def __init__(
        self, model_class: Type[T], schema_class: Type[SchemaType], db: Session
    ):
        self.model_class = model_class
        self.schema_class = schema_class
        self.db = db

    def _to_schema(self, instance: Any) -> Optional[SchemaType]:
        if instance is None:
            return None
        return self.schema_class.model_validate(instance)

    def _filtered(self, filters: Optional[Dict[str, Any]] = None) -> Query:
        query = self.db.query(self.model_class)
        for key, value in (filters or {}).items():
            column = getattr(self.model_class, key, None)
            if column is None:
                raise AttributeError(f"{self.model_class.__name__} has no column '{key}'")
            query = query.filter(column == value)
        return query

    def get_model(self, id: Any) -> Optional[T]:
        """ORM 인스턴스 조회 (서비스 내부용)"""
        return self.db.get(self.model_class, id)

    def get_by_id(self, id: Any) -> Optional[SchemaType]:
        return self._to_schema(self.get_model(id))

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        return self._filtered(filters).count()

    def create(self, commit: bool = True, **values) -> T:
        """레코드 생성 후 DB 기본값(id, created_at)까지 채운 ORM 인스턴스 반환"""
        instance = self.model_class(**values)
        self.db.add(instance)
        try:
            self.db.flush()
            self.db.refresh(instance)
            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return instance
