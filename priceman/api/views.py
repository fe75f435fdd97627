"""
Priceman API Views — ViewSet de produtos para a REST API.

O repositório usado é o configurado em PRICEMAN["REPOSITORY"]
(default: DjangoProductRepository). Erros de domínio viram 400 com
{code, message, context}; produtos inexistentes viram 404.
"""

from __future__ import annotations

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError as DRFValidationError
from rest_framework.response import Response

from priceman.conf import get_priceman_setting, get_repository
from priceman.exceptions import NotFoundError, PricemanError
from priceman.services import ProductService

from .serializers import (
    BulkPriceDataSerializer,
    BulkUpdateReportSerializer,
    BulkUpdateSerializer,
    ProductSerializer,
    ProductWriteSerializer,
    SeasonalDiscountSerializer,
)


logger = logging.getLogger(__name__)


def _get_role(request) -> str:
    """Staff enxerga produtos ocultos; demais usuários são clientes."""
    user = getattr(request, "user", None)
    return "admin" if getattr(user, "is_staff", False) else "customer"


def _api_error(error: PricemanError) -> Exception:
    payload = {"code": error.code, "message": error.message, "context": error.context}
    if isinstance(error, NotFoundError):
        return NotFound(payload)
    return DRFValidationError(payload)


def _parse_pk(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise NotFound({"code": "not_found", "message": f"Product not found: {value}", "context": {}})


class ProductViewSet(viewsets.ViewSet):
    """
    ViewSet para produtos e preços.

    Endpoints:
        GET    /api/products - Lista (filtros: search, category, min_price, max_price, barcode)
        POST   /api/products - Cria produto
        GET    /api/products/{id} - Detalhes
        PATCH  /api/products/{id} - Atualização parcial
        DELETE /api/products/{id} - Remove
        POST   /api/products/{id}/seasonal-discount - Aplica desconto sazonal
        POST   /api/products/bulk-update-prices - Atualização de preços em lote
        POST   /api/products/validate - Valida um estado de preço proposto
        GET    /api/products/filter-options - Categorias e faixa de preço
        GET    /api/products/bulk-price-data - Listagem paginada para preços em lote
    """

    lookup_value_regex = r"\d+"

    def get_permissions(self):
        return [cls() for cls in get_priceman_setting("DEFAULT_PERMISSION_CLASSES")]

    def get_service(self) -> ProductService:
        return ProductService(get_repository())

    def list(self, request):
        service = self.get_service()
        params = request.query_params
        role = _get_role(request)

        barcode = params.get("barcode")
        if barcode:
            try:
                product = service.get_by_barcode(barcode)
            except NotFoundError as e:
                raise _api_error(e)
            products = [product] if (product.is_visible or role != "customer") else []
        elif any(params.get(k) for k in ("search", "category", "min_price", "max_price")):
            try:
                products = service.search_and_filter(
                    search=params.get("search", ""),
                    category=params.get("category"),
                    min_price=params.get("min_price"),
                    max_price=params.get("max_price"),
                )
            except PricemanError as e:
                raise _api_error(e)
            if role == "customer":
                products = [p for p in products if p.is_visible]
        else:
            products = service.list_products(role=role)

        return Response(ProductSerializer(products, many=True).data)

    def retrieve(self, request, pk=None):
        try:
            product = self.get_service().get_product(_parse_pk(pk), role=_get_role(request))
        except NotFoundError as e:
            raise _api_error(e)
        return Response(ProductSerializer(product).data)

    def create(self, request):
        s = ProductWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            product = self.get_service().create_product(s.validated_data)
        except PricemanError as e:
            logger.warning("Product create failed: %s (%s)", e.message, e.code)
            raise _api_error(e)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        s = ProductWriteSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        try:
            product = self.get_service().update_product(_parse_pk(pk), s.validated_data)
        except PricemanError as e:
            logger.warning("Product %s update failed: %s (%s)", pk, e.message, e.code)
            raise _api_error(e)
        return Response(ProductSerializer(product).data)

    def destroy(self, request, pk=None):
        try:
            self.get_service().delete_product(_parse_pk(pk))
        except NotFoundError as e:
            raise _api_error(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="seasonal-discount")
    def seasonal_discount(self, request, pk=None):
        s = SeasonalDiscountSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        try:
            product = self.get_service().add_seasonal_discount(
                _parse_pk(pk),
                value=data["value"],
                discount_type=data["discount_type"],
                start_date=data.get("start_date"),
                end_date=data.get("end_date"),
            )
        except PricemanError as e:
            raise _api_error(e)
        return Response(ProductSerializer(product).data)

    @action(detail=False, methods=["post"], url_path="bulk-update-prices")
    def bulk_update_prices(self, request):
        """
        Atualiza preços em lote.

        Returns:
            200: Relatório (mesmo com conflitos por item)
            400: Pedido mal formado (nenhum produto alterado)
        """
        s = BulkUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            report = self.get_service().bulk_update_prices(s.validated_data)
        except PricemanError as e:
            raise _api_error(e)

        logger.info(
            "Bulk price update finished",
            extra={"summary": report.summary, "conflicts": len(report.conflicts)},
        )
        return Response(BulkUpdateReportSerializer(report).data)

    @action(detail=False, methods=["post"], url_path="validate")
    def validate(self, request):
        """Valida preço (fail-fast) e hierarquia (conflitos + avisos) sem gravar nada."""
        service = self.get_service()
        exclude_id = request.data.get("id")
        if exclude_id is not None:
            exclude_id = _parse_pk(exclude_id)
        candidate = {k: v for k, v in request.data.items() if k != "id"}
        price = service.validate_price_update(candidate)
        hierarchy = service.validate_pricing_hierarchy(candidate, exclude_id=exclude_id)
        return Response({"price": price.as_dict(), "hierarchy": hierarchy.as_dict()})

    @action(detail=False, methods=["get"], url_path="filter-options")
    def filter_options(self, request):
        options = self.get_service().filter_options()
        return Response({
            "categories": options["categories"],
            "price_range": {k: str(v) for k, v in options["price_range"].items()},
        })

    @action(detail=False, methods=["get"], url_path="bulk-price-data")
    def bulk_price_data(self, request):
        """
        Listagem paginada com os mesmos filtros de GET /api/products.

        Query params: page, limit, search, category, min_price, max_price
        """
        params = request.query_params
        try:
            data = self.get_service().bulk_price_data(
                page=params.get("page", 1),
                limit=params.get("limit", 100),
                role=_get_role(request),
                search=params.get("search", ""),
                category=params.get("category"),
                min_price=params.get("min_price"),
                max_price=params.get("max_price"),
            )
        except PricemanError as e:
            raise _api_error(e)
        return Response(BulkPriceDataSerializer(data).data)
