"""Product catalogue operations and the product deletion guard."""

import logging
from typing import Any

from insurance_backoffice.db.constants import ACTION_CREATED, ACTION_DELETED, ACTION_UPDATED
from insurance_backoffice.db.repository import AuditRecord, PolicyRepository, ProductRepository
from insurance_backoffice.errors import InvalidArgumentError, NotFoundError
from insurance_backoffice.models.entities import (
    Created,
    Deleted,
    Product,
    ProductInput,
    ProductUpdate,
)
from insurance_backoffice.models.enums import EntityType, ProductType
from insurance_backoffice.observability import get_logger
from insurance_backoffice.rules.dates import Clock, system_today
from insurance_backoffice.rules.guards import check_product_deletable
from insurance_backoffice.rules.status import parse_status
from insurance_backoffice.services.common import (
    changed_fields,
    count_in_force,
    fetch_created,
    validate_payload,
)

logger = get_logger(__name__)

ENTITY = EntityType.PRODUCT.value


class ProductService:
    """Create, edit, list and delete products."""

    def __init__(self, db_path: str | None = None, clock: Clock = system_today):
        self._products = ProductRepository(db_path)
        self._policies = PolicyRepository(db_path)
        self._clock = clock

    def _load(self, product_id: int) -> Product:
        row = self._products.get(product_id)
        if row is None:
            raise NotFoundError(ENTITY, product_id)
        return Product.model_validate(row)

    def create_product(self, data: ProductInput | dict[str, Any]) -> Created[Product]:
        payload = validate_payload(ProductInput, data, ENTITY)
        product_id = self._products.insert(
            payload.model_dump(),
            audit=AuditRecord(ENTITY, ACTION_CREATED, details=payload.name),
        )
        logger.bind(ENTITY, product_id).log_event(
            "product_created", name=payload.name, type=payload.type.value
        )
        return fetch_created(ENTITY, product_id, lambda: self.get_product(product_id), logger)

    def get_product(self, product_id: int) -> Product:
        return self._load(product_id)

    def list_products(
        self,
        product_type: ProductType | str | None = None,
        active: bool | None = None,
    ) -> list[Product]:
        if product_type is not None:
            product_type = parse_status(ProductType, product_type, ENTITY, field="type")
        rows = self._products.find_all(product_type=product_type, active=active)
        return [Product.model_validate(r) for r in rows]

    def search_products(self, term: str) -> list[Product]:
        """Active products matching term in name, type or description."""
        term = (term or "").strip()
        if not term:
            return []
        return [Product.model_validate(r) for r in self._products.search(term)]

    def update_product(self, product_id: int, data: ProductUpdate | dict[str, Any]) -> Product:
        payload = validate_payload(ProductUpdate, data, ENTITY)
        fields = changed_fields(payload)
        if not fields:
            raise InvalidArgumentError("No fields to update")
        self._load(product_id)
        self._products.update(
            product_id,
            fields,
            audit=AuditRecord(ENTITY, ACTION_UPDATED, details=", ".join(sorted(fields))),
        )
        logger.bind(ENTITY, product_id).log_event("product_updated", fields=sorted(fields))
        return self._load(product_id)

    def delete_product(self, product_id: int) -> Deleted:
        """Delete a product unless a policy on it is still active."""
        product = self._load(product_id)
        active = count_in_force(self._policies.find_all(product_id=product_id), self._clock())
        bound = logger.bind(ENTITY, product_id)
        if active:
            bound.log_event(
                "product_delete_blocked", level=logging.WARNING, active_policy_count=active
            )
        check_product_deletable(product_id, active)
        self._products.delete(
            product_id, audit=AuditRecord(ENTITY, ACTION_DELETED, details=product.name)
        )
        bound.log_event("product_deleted")
        return Deleted(entity=ENTITY, id=product_id, message="Product deleted successfully")
