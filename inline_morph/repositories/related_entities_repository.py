"""多态关联对象 Repository.

职责:
- 仅负责把关联对象写入会话并 flush 以获得主键
- 不做校验、不返回 Response、不 commit、不 rollback
"""

from __future__ import annotations

from inline_morph import db


class RelatedEntitiesRepository:
    """关联对象写入 Repository."""

    def save(self, entity: object) -> object:
        """写入并 flush,存储层的 SQLAlchemyError 原样抛出."""
        db.session.add(entity)
        db.session.flush()
        return entity

    @staticmethod
    def get(model: type[object], entity_id: object) -> object | None:
        return db.session.get(model, entity_id)
