# app/repositories/base_repository.py
from typing import TypeVar, Generic, Optional, Type, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from app.core.database import Base
from app.core.exceptions import LedgerError

# Type générique pour les modèles
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Repository générique pour les opérations CRUD de base

    Toute erreur SQLAlchemy annule la transaction en cours et remonte
    sous forme de LedgerError.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    def _fail(self, action: str, error: SQLAlchemyError) -> LedgerError:
        self.db.rollback()
        return LedgerError(f"Ledger {action} failed on {self.model.__tablename__}: {error}")

    def get_by_id(self, id: Any) -> Optional[ModelType]:
        """Récupère un enregistrement par son ID"""
        try:
            return self.db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            raise self._fail("read", e) from e

    def create(self, obj_data: Dict[str, Any]) -> ModelType:
        """Crée un nouvel enregistrement"""
        try:
            db_obj = self.model(**obj_data)
            self.db.add(db_obj)
            self.db.commit()
            self.db.refresh(db_obj)
            return db_obj
        except SQLAlchemyError as e:
            raise self._fail("insert", e) from e

    def update(self, id: Any, obj_data: Dict[str, Any]) -> Optional[ModelType]:
        """Met à jour un enregistrement existant"""
        try:
            db_obj = self.get_by_id(id)
            if db_obj:
                for field, value in obj_data.items():
                    if hasattr(db_obj, field):
                        setattr(db_obj, field, value)
                self.db.commit()
                self.db.refresh(db_obj)
            return db_obj
        except SQLAlchemyError as e:
            raise self._fail("update", e) from e

    def delete(self, id: Any) -> bool:
        """Supprime un enregistrement"""
        try:
            db_obj = self.get_by_id(id)
            if db_obj:
                self.db.delete(db_obj)
                self.db.commit()
                return True
            return False
        except SQLAlchemyError as e:
            raise self._fail("delete", e) from e

    def count(self) -> int:
        """Compte le nombre total d'enregistrements"""
        try:
            return self.db.query(self.model).count()
        except SQLAlchemyError as e:
            raise self._fail("read", e) from e
