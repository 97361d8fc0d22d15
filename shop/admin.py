from django.contrib import admin
from django.utils.html import format_html
import nested_admin
from .models import Product, Category, ContactMessage, ProductVariant, ProductSize, Order, OrderItem, Review
from .reviews import refresh_product_rating


# --- 1. ProductSizeInline ---
class ProductSizeInline(nested_admin.NestedTabularInline):
    model = ProductSize
    extra = 1
    fields = ['size_name', 'stock']


# --- 2. ProductVariantInline ---
class ProductVariantInline(nested_admin.NestedStackedInline):
    model = ProductVariant
    extra = 1
    fields = ['color_name', 'color_code', 'variant_image', 'image_preview']
    readonly_fields = ['image_preview']
    inlines = [ProductSizeInline]

    @admin.display(description='Preview')
    def image_preview(self, obj):
        if obj.variant_image:
            return format_html('<img src="{}" style="width: 100px; height: auto; border-radius: 5px;" />', obj.variant_image.url)
        return "No Image"


# --- 3. ProductAdmin ---
@admin.register(Product)
class ProductAdmin(nested_admin.NestedModelAdmin):
    inlines = [ProductVariantInline]

    list_display = ['sku', 'name', 'name_ar', 'category', 'colored_stock', 'display_price', 'rating', 'is_featured', 'is_new']
    list_display_links = ['name']
    list_editable = ['category', 'is_featured', 'is_new']
    list_filter = ['category', 'material', 'is_featured', 'is_new', 'created_at']
    search_fields = ['sku', 'name', 'name_ar', 'description', 'tags']

    fieldsets = (
        ('Basic Information', {
            'fields': (('name', 'name_ar'), 'sku', 'category', 'description', 'description_ar'),
            'classes': ('wide',),
        }),
        ('Pricing & Inventory', {
            'fields': (('price', 'original_price'), 'stock'),
        }),
        ('Merchandising', {
            'fields': ('material', 'tags', ('is_new', 'is_featured'), ('rating', 'review_count')),
        }),
    )
    # المخزون والتقييم يُحسبان تلقائياً
    readonly_fields = ['stock', 'rating', 'review_count']

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        form.instance.update_total_stock()

    @admin.display(description='Stock Status')
    def colored_stock(self, obj):
        color = 'green' if obj.stock > 10 else 'orange' if obj.stock > 0 else 'red'
        return format_html('<b style="color: {};">{}</b>', color, obj.stock)

    @admin.display(description='Price')
    def display_price(self, obj):
        return format_html('<b>{}</b> <small>SAR</small>', obj.price)


# --- 4. CategoryAdmin ---
@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'name_ar', 'slug']
    prepopulated_fields = {'slug': ('name',)}


# --- 5. ContactMessageAdmin ---
@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ['name', 'subject', 'email', 'created_at']
    readonly_fields = ['name', 'email', 'phone', 'subject', 'message', 'created_at']


# --- 6. OrderItemInline & OrderAdmin ---
class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['product', 'product_ref', 'name', 'color', 'size', 'quantity', 'price']
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer_name', 'phone', 'city', 'total', 'payment_method', 'status', 'is_completed', 'created_at']
    list_filter = ['status', 'payment_method', 'is_completed', 'city', 'created_at']
    search_fields = ['customer_name', 'phone', 'email', 'id']
    list_editable = ['status', 'is_completed']
    inlines = [OrderItemInline]

    fieldsets = (
        ('Customer Info', {'fields': (('customer_name', 'email'), 'phone', 'user')}),
        ('Shipping Address', {'fields': ('shipping_name', 'street', ('city', 'postal_code'), 'country', 'notes')}),
        ('Payment & Status', {'fields': (('payment_method', 'payment_id'), ('status', 'is_completed'), 'total')}),
    )
    readonly_fields = ['total', 'payment_id']


# --- 7. ReviewAdmin ---
@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['product', 'user_name', 'rating', 'title', 'verified', 'helpful', 'created_at']
    list_filter = ['rating', 'verified']
    list_editable = ['verified']
    search_fields = ['title', 'comment', 'user_name', 'user_email']

    def delete_model(self, request, obj):
        product = obj.product
        super().delete_model(request, obj)
        refresh_product_rating(product)
