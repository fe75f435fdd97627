from __future__ import annotations

from rest_framework import serializers

from priceman.types import ConflictResolution, DiscountType, Strategy, UpdateType


MONEY = {"max_digits": 12, "decimal_places": 2}


class ProductSerializer(serializers.Serializer):
    """Representação de leitura de um Product (dataclass)."""

    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    category = serializers.CharField(read_only=True)
    base_price = serializers.DecimalField(read_only=True, **MONEY)
    variation_price = serializers.DecimalField(read_only=True, allow_null=True, **MONEY)
    purchase_price = serializers.DecimalField(read_only=True, **MONEY)
    discount_value = serializers.DecimalField(read_only=True, **MONEY)
    discount_type = serializers.CharField(read_only=True)
    seasonal_discount = serializers.DecimalField(read_only=True, **MONEY)
    seasonal_discount_type = serializers.CharField(read_only=True)
    seasonal_discount_active = serializers.BooleanField(read_only=True)
    seasonal_start = serializers.DateField(read_only=True, allow_null=True)
    seasonal_end = serializers.DateField(read_only=True, allow_null=True)
    effective_price = serializers.DecimalField(read_only=True, **MONEY)
    profit_margin = serializers.DecimalField(read_only=True, max_digits=14, decimal_places=2)
    min_selling_price = serializers.DecimalField(read_only=True, **MONEY)
    stock = serializers.IntegerField(read_only=True)
    min_stock = serializers.IntegerField(read_only=True)
    barcode = serializers.CharField(read_only=True)
    is_visible = serializers.BooleanField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)


class ProductWriteSerializer(serializers.Serializer):
    """
    POST /api/products e PATCH /api/products/{id}

    Todos os campos são opcionais aqui; obrigatoriedade e regras de preço
    são verificadas pelo ProductService.
    """

    name = serializers.CharField(required=False, max_length=255)
    category = serializers.CharField(required=False, max_length=128)
    base_price = serializers.DecimalField(required=False, **MONEY)
    variation_price = serializers.DecimalField(required=False, allow_null=True, **MONEY)
    purchase_price = serializers.DecimalField(required=False, **MONEY)
    discount_value = serializers.DecimalField(required=False, **MONEY)
    discount_type = serializers.ChoiceField(required=False, choices=DiscountType.choices)
    seasonal_discount = serializers.DecimalField(required=False, **MONEY)
    seasonal_discount_type = serializers.ChoiceField(required=False, choices=DiscountType.choices)
    seasonal_discount_active = serializers.BooleanField(required=False)
    seasonal_start = serializers.DateField(required=False, allow_null=True)
    seasonal_end = serializers.DateField(required=False, allow_null=True)
    stock = serializers.IntegerField(required=False, min_value=0)
    min_stock = serializers.IntegerField(required=False, min_value=0)
    barcode = serializers.CharField(required=False, max_length=64)
    is_visible = serializers.BooleanField(required=False)


class SeasonalDiscountSerializer(serializers.Serializer):
    value = serializers.DecimalField(**MONEY)
    discount_type = serializers.ChoiceField(choices=DiscountType.choices, default=DiscountType.PERCENTAGE)
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)


class PriceGuardsSerializer(serializers.Serializer):
    enabled = serializers.BooleanField(default=False)
    min_price = serializers.DecimalField(required=False, allow_null=True, **MONEY)
    max_price = serializers.DecimalField(required=False, allow_null=True, **MONEY)
    enforce_margin = serializers.BooleanField(default=False)
    min_margin = serializers.DecimalField(required=False, max_digits=6, decimal_places=2)


class BulkUpdateSerializer(serializers.Serializer):
    """
    POST /api/products/bulk-update-prices

    Campos de estratégia são opcionais aqui: pedidos incompletos chegam ao
    PriceValidator, que responde com um código de erro específico.
    """

    update_type = serializers.ChoiceField(choices=UpdateType.choices, default=UpdateType.PRICE)
    strategy = serializers.ChoiceField(choices=Strategy.choices, required=False, allow_null=True)
    value = serializers.DecimalField(required=False, allow_null=True, **MONEY)
    min_price = serializers.DecimalField(required=False, allow_null=True, **MONEY)
    max_price = serializers.DecimalField(required=False, allow_null=True, **MONEY)
    target_field = serializers.ChoiceField(choices=["base_price", "purchase_price"], default="base_price")
    apply_to = serializers.ChoiceField(choices=["all", "selected_rows"], default="all")
    selected_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    category = serializers.CharField(required=False, default="all")
    low_stock_only = serializers.BooleanField(default=False)
    stock_threshold = serializers.IntegerField(required=False, min_value=0)
    price_guards = PriceGuardsSerializer(required=False)
    discount_value = serializers.DecimalField(required=False, allow_null=True, **MONEY)
    discount_type = serializers.ChoiceField(choices=DiscountType.choices, default=DiscountType.PERCENTAGE)
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)
    conflict_resolution = serializers.ChoiceField(
        choices=ConflictResolution.choices, default=ConflictResolution.SKIP
    )


class UpdateResultSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    product_name = serializers.CharField()
    old_price = serializers.DecimalField(**MONEY)
    new_price = serializers.DecimalField(**MONEY)
    change = serializers.DecimalField(**MONEY)
    target_field = serializers.CharField()


class ConflictSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    product_name = serializers.CharField()
    reason = serializers.CharField()
    code = serializers.CharField()
    details = serializers.ListField(child=serializers.CharField())


class BulkUpdateReportSerializer(serializers.Serializer):
    updated_count = serializers.IntegerField()
    total_filtered = serializers.IntegerField()
    skipped_count = serializers.IntegerField()
    conflicts = ConflictSerializer(many=True)
    update_results = UpdateResultSerializer(many=True)
    summary = serializers.CharField()
    price_guards_applied = serializers.BooleanField()
    cancelled = serializers.BooleanField()


class PaginationSerializer(serializers.Serializer):
    page = serializers.IntegerField()
    limit = serializers.IntegerField()
    total = serializers.IntegerField()
    total_pages = serializers.IntegerField()


class BulkPriceDataSerializer(serializers.Serializer):
    products = ProductSerializer(many=True)
    pagination = PaginationSerializer()
