import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from django.core.exceptions import ValidationError as DjangoValidationError

from apps.catalog.models import Product
from apps.utils.exceptions import (
    IdempotencyConflict,
    InsufficientStock,
    NotFoundError,
    OrderCreationFailed,
    ValidationFailed,
)
from .filters import OrderFilter
from .models import Order, OrderItem
from .serializers import (
    MinimalOrderItemSerializer,
    MinimalOrderSerializer,
    OrderDetailSerializer,
    OrderSerializer,
)

logger = logging.getLogger(__name__)


class OrderService:

    @staticmethod
    def enriched_queryset():
        return (
            Order.objects
            .select_related("user")
            .prefetch_related("items__product")
            .order_by("-created_at")
        )

    @staticmethod
    def place_order(user, *, total_amount, shipping_address, phone, payment_method,
                    items, notes=None, idempotency_key=None):
        """
        Creates the order header, its line items and decrements product stock
        as one unit of work.

        1. Idempotency replay (same user + key + same payload returns the
           existing order; a different payload under that key is a conflict)
        2. Atomic block: header, then per item insert + guarded stock UPDATE
        3. Best-effort enriched read-back after commit

        Returns (order, payload).
        """
        if idempotency_key:
            existing = OrderService._find_by_idempotency_key(user, idempotency_key)
            if existing is not None:
                OrderService._ensure_same_request(existing, total_amount, items)
                logger.info(
                    f"Idempotent replay of order {existing.id}",
                    extra={"order_id": str(existing.id), "user_id": str(user.id)},
                )
                return existing, OrderService.read_back(existing)

        try:
            order, line_items = OrderService._create_with_stock_adjustment(
                user=user,
                total_amount=total_amount,
                shipping_address=shipping_address,
                phone=phone,
                payment_method=payment_method,
                items=items,
                notes=notes,
                idempotency_key=idempotency_key,
            )
        except IntegrityError as exc:
            # A concurrent request with the same key won the race
            if idempotency_key:
                existing = OrderService._find_by_idempotency_key(user, idempotency_key)
                if existing is not None:
                    OrderService._ensure_same_request(existing, total_amount, items)
                    return existing, OrderService.read_back(existing)
            logger.error(f"Order placement failed for user {user.id}: {exc}", extra={"user_id": str(user.id)})
            raise OrderCreationFailed() from exc
        except DatabaseError as exc:
            logger.error(f"Order placement failed for user {user.id}: {exc}", extra={"user_id": str(user.id)})
            raise OrderCreationFailed() from exc

        logger.info(
            f"Order {order.id} created with {len(line_items)} item(s)",
            extra={"order_id": str(order.id), "user_id": str(user.id)},
        )
        return order, OrderService.read_back(order, line_items)

    @staticmethod
    @transaction.atomic
    def _create_with_stock_adjustment(user, total_amount, shipping_address, phone,
                                      payment_method, items, notes, idempotency_key):
        order = Order.objects.create(
            user=user,
            total_amount=total_amount,
            status=Order.Status.PENDING,
            shipping_address=shipping_address,
            phone=phone,
            payment_method=payment_method,
            notes=notes or None,
            idempotency_key=idempotency_key or None,
        )

        # Lock rows in deterministic order so two checkouts touching the same
        # products in different orders cannot deadlock (no-op on SQLite)
        product_ids = sorted({str(item["product_id"]) for item in items})
        list(Product.objects.select_for_update().filter(pk__in=product_ids).order_by("pk").values_list("pk", flat=True))

        now = timezone.now()
        line_items = []
        for item in items:
            pid = item["product_id"]
            qty = item["quantity"]

            line_items.append(OrderItem.objects.create(
                order=order,
                product_id=pid,
                quantity=qty,
                price_per_unit=item["price_per_unit"],
            ))

            # Single conditional UPDATE; never read-then-write
            updated = Product.objects.filter(pk=pid, stock_quantity__gte=qty).update(
                stock_quantity=F("stock_quantity") - qty,
                updated_at=now,
            )
            if updated == 0:
                available = Product.objects.filter(pk=pid).values_list("stock_quantity", flat=True).first()
                if available is None:
                    raise NotFoundError(f"Product {pid} not found")
                logger.warning(
                    f"Insufficient stock for product {pid}: requested {qty}, available {available}",
                    extra={"product_id": str(pid), "user_id": str(user.id)},
                )
                raise InsufficientStock(pid, available, qty)

        return order, line_items

    @staticmethod
    def _find_by_idempotency_key(user, key):
        return Order.objects.filter(user=user, idempotency_key=key).first()

    @staticmethod
    def _ensure_same_request(order, total_amount, items):
        stored = sorted(
            (str(i.product_id), i.quantity, i.price_per_unit) for i in order.items.all()
        )
        requested = sorted(
            (str(i["product_id"]), i["quantity"], i["price_per_unit"]) for i in items
        )
        if order.total_amount != total_amount or stored != requested:
            logger.warning(
                f"Idempotency key reused with a different payload for order {order.id}",
                extra={"order_id": str(order.id), "user_id": str(order.user_id)},
            )
            raise IdempotencyConflict()

    @staticmethod
    def read_back(order, line_items=None):
        """
        Enriched representation of a committed order. A failure here only
        degrades the payload to the minimal shape; the order stays committed.
        """
        try:
            enriched = OrderService.enriched_queryset().get(pk=order.pk)
            return OrderSerializer(enriched).data
        except (DatabaseError, Order.DoesNotExist):
            logger.warning(
                f"Read-back of order {order.pk} failed; returning minimal representation",
                exc_info=True,
                extra={"order_id": str(order.pk)},
            )

        payload = dict(MinimalOrderSerializer(order).data)
        if line_items is not None:
            payload["items"] = MinimalOrderItemSerializer(line_items, many=True).data
        return payload

    @staticmethod
    def get_order(order_id) -> Order:
        try:
            return OrderService.enriched_queryset().get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Order not found")

    @staticmethod
    def get_order_detail(order_id):
        return OrderDetailSerializer(OrderService.get_order(order_id)).data

    @staticmethod
    def list_orders(user_id=None, status=None, viewer=None):
        """
        Newest first. status='all' (or empty) means no status filter.
        A non-admin viewer only ever sees their own orders.
        """
        qs = OrderService.enriched_queryset()
        if viewer is not None and not viewer.is_admin:
            qs = qs.filter(user=viewer)

        data = {}
        if user_id:
            data["userId"] = str(user_id)
        if status:
            data["status"] = status

        filterset = OrderFilter(data=data, queryset=qs)
        if not filterset.is_valid():
            errors = filterset.errors.get_json_data()
            raise ValidationFailed(errors={field: [e["message"] for e in errs] for field, errs in errors.items()})
        return filterset.qs

    @staticmethod
    @transaction.atomic
    def update_status(order_id, new_status) -> Order:
        """
        Any status may move to any other status.
        """
        return OrderService.update_order(order_id, status=new_status)

    @staticmethod
    @transaction.atomic
    def update_order(order_id, status=None, shipping_address=None) -> Order:
        try:
            order = Order.objects.select_for_update().get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Order not found")

        fields = []
        if status is not None:
            previous = order.status
            order.status = status
            fields.append("status")
        if shipping_address is not None:
            order.shipping_address = shipping_address
            fields.append("shipping_address")

        if fields:
            order.save(update_fields=fields + ["updated_at"])

        if status is not None:
            logger.info(
                f"Order {order.id} status {previous} -> {status}",
                extra={"order_id": str(order.id)},
            )
        return order

    @staticmethod
    @transaction.atomic
    def delete_order(order_id):
        """
        Hard delete; line items cascade. Stock is not restored.
        """
        try:
            deleted, _ = Order.objects.filter(pk=order_id).delete()
        except (DjangoValidationError, ValueError):
            raise NotFoundError("Order not found")

        if deleted == 0:
            raise NotFoundError("Order not found")
        logger.info(f"Order {order_id} deleted", extra={"order_id": str(order_id)})
