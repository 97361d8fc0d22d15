import logging
import uuid

from colorfield.fields import ColorField
from django.conf import settings
from django.core.mail import send_mail
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Sum
from django.utils.text import slugify
from django.utils.translation import get_language
from django.utils.translation import gettext_lazy as _

logger = logging.getLogger(__name__)


def _prefers_arabic():
    return (get_language() or "").startswith("ar")


# --- 1. قسم الفئات (Categories) ---
class Category(models.Model):
    name = models.CharField(max_length=100, unique=True)
    name_ar = models.CharField(max_length=100, blank=True)
    slug = models.SlugField(max_length=100, unique=True, blank=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    @property
    def display_name(self):
        return self.name_ar if _prefers_arabic() and self.name_ar else self.name

    class Meta:
        verbose_name_plural = "Categories"
        ordering = ['name']


# --- 2. قسم المنتجات (Products) ---
class Product(models.Model):
    MATERIAL_CHOICES = [
        ('cotton', _('Cotton')),
        ('polyester', _('Polyester')),
        ('silk', _('Silk')),
        ('linen', _('Linen')),
        ('wool', _('Wool')),
        ('viscose', _('Viscose')),
        ('chiffon', _('Chiffon')),
        ('crepe', _('Crepe')),
        ('jersey', _('Jersey')),
        ('georgette', _('Georgette')),
    ]

    name = models.CharField(max_length=200)
    name_ar = models.CharField(max_length=200, blank=True)
    sku = models.CharField(
        max_length=50,
        unique=True,
        blank=True,
        null=True,
        verbose_name="SKU (Stock Keeping Unit)"
    )
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, related_name='products', null=True, blank=True)
    description = models.TextField()
    description_ar = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    # السعر قبل الخصم، يظهر مشطوباً
    original_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    material = models.CharField(max_length=20, choices=MATERIAL_CHOICES, blank=True)
    tags = models.CharField(max_length=255, blank=True, help_text="Comma separated")
    is_new = models.BooleanField(default=False)
    is_featured = models.BooleanField(default=False)

    stock = models.PositiveIntegerField(default=0, verbose_name="Total Stock Quantity", editable=False)
    rating = models.FloatField(default=0, editable=False)
    review_count = models.PositiveIntegerField(default=0, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.sku if self.sku else 'No SKU'})"

    def save(self, *args, **kwargs):
        # توليد SKU تلقائي إذا كان الحقل فارغاً
        if not self.sku:
            prefix = self.name[:3].upper() if self.name else "PRD"
            unique_id = str(uuid.uuid4().hex[:6].upper())
            self.sku = f"{prefix}-{unique_id}"

        super().save(*args, **kwargs)

    def update_total_stock(self):
        """تحديث إجمالي المخزون للمنتج بناءً على مجموع كافة المقاسات والألوان"""
        total = ProductSize.objects.filter(variant__product=self).aggregate(total=Sum('stock'))['total'] or 0
        Product.objects.filter(pk=self.pk).update(stock=total)
        self.stock = total

    @property
    def display_name(self):
        return self.name_ar if _prefers_arabic() and self.name_ar else self.name

    @property
    def display_description(self):
        return self.description_ar if _prefers_arabic() and self.description_ar else self.description

    @property
    def tag_list(self):
        return [t.strip() for t in self.tags.split(',') if t.strip()]

    @property
    def main_image(self):
        first_variant = self.variants.first()
        if first_variant and first_variant.variant_image:
            return first_variant.variant_image.url
        return None

    @property
    def in_stock(self):
        return self.stock > 0

    @property
    def available_sizes(self):
        names = ProductSize.objects.filter(variant__product=self).values_list('size_name', flat=True)
        return sorted(set(names))

    @property
    def available_colors(self):
        return list(self.variants.values_list('color_name', flat=True).distinct())

    @property
    def discount_percentage(self):
        if self.original_price and self.original_price > self.price:
            discount = ((self.original_price - self.price) / self.original_price) * 100
            return int(discount)
        return 0


# --- 3. قسم ألوان المنتجات (Variants) ---
class ProductVariant(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    color_name = models.CharField(max_length=50)
    color_code = ColorField(default='#000000')
    variant_image = models.ImageField(upload_to='variants/', blank=True)

    @property
    def total_stock(self):
        return self.sizes.aggregate(total=Sum('stock'))['total'] or 0

    def __str__(self):
        return f"{self.product.name} - {self.color_name}"


# --- 4. قسم المقاسات (Product Sizes) ---
class ProductSize(models.Model):
    SIZE_CHOICES = [
        ('XS', 'XS'),
        ('S', 'S'),
        ('M', 'M'),
        ('L', 'L'),
        ('XL', 'XL'),
        ('XXL', 'XXL'),
    ]

    variant = models.ForeignKey(ProductVariant, on_delete=models.CASCADE, related_name='sizes')
    size_name = models.CharField(max_length=20, verbose_name="Size (S, M, L, 52, etc.)")
    stock = models.PositiveIntegerField(default=5, verbose_name="Stock for this Size")

    def __str__(self):
        return f"{self.variant.product.name} - {self.variant.color_name} - {self.size_name}"

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        self.variant.product.update_total_stock()

    def delete(self, *args, **kwargs):
        product = self.variant.product
        result = super().delete(*args, **kwargs)
        product.update_total_stock()
        return result


# --- 5. نظام الطلبات (Orders System) ---
class Order(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_PROCESSING = 'processing'
    STATUS_SHIPPED = 'shipped'
    STATUS_DELIVERED = 'delivered'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, _('Pending')),
        (STATUS_PROCESSING, _('Processing')),
        (STATUS_SHIPPED, _('Shipped')),
        (STATUS_DELIVERED, _('Delivered')),
        (STATUS_CANCELLED, _('Cancelled')),
    ]
    PAYMENT_CHOICES = [
        ('apple_pay', _('Apple Pay')),
        ('credit_card', _('Credit card')),
        ('bank_transfer', _('Bank transfer')),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    customer_name = models.CharField(max_length=255, verbose_name="Customer Name")
    email = models.EmailField(verbose_name="Email Address")
    phone = models.CharField(max_length=20, verbose_name="Phone Number")

    shipping_name = models.CharField(max_length=255)
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=100, default='Saudi Arabia')
    notes = models.TextField(blank=True)

    total = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Total Amount")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, verbose_name="Order Status")
    payment_method = models.CharField(max_length=20, choices=PAYMENT_CHOICES)
    payment_id = models.CharField(max_length=64, blank=True)
    is_completed = models.BooleanField(default=False, verbose_name="Is Completed?")
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Order Date")
    updated_at = models.DateTimeField(auto_now=True)

    __original_status = None

    class Meta:
        ordering = ['-created_at']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.__original_status = self.status

    def __str__(self):
        return f"Order #{self.id} - {self.customer_name}"

    def save(self, *args, **kwargs):
        status_changed = self.pk and self.status != self.__original_status
        if status_changed and self.status == self.STATUS_DELIVERED:
            self.is_completed = True
        super().save(*args, **kwargs)
        if status_changed:
            self.send_status_notification()
        self.__original_status = self.status

    def send_status_notification(self):
        subject = f"{settings.STORE_NAME} - Order #{self.id} Update"
        messages_map = {
            self.STATUS_PROCESSING: "We are preparing your order.",
            self.STATUS_SHIPPED: "Great news! Your order is now on its way to you.",
            self.STATUS_DELIVERED: "Your order has been delivered successfully!",
            self.STATUS_CANCELLED: "We're sorry, but your order has been cancelled.",
        }
        status_msg = messages_map.get(self.status, f"Your order status has been updated to: {self.get_status_display()}")
        email_body = f"Hi {self.customer_name},\n\n{status_msg}\n\nThank you for choosing {settings.STORE_NAME}!"
        try:
            send_mail(subject, email_body, settings.EMAIL_HOST_USER, [self.email])
        except Exception:
            logger.exception("Failed to send status email for order %s", self.pk)


class OrderItem(models.Model):
    order = models.ForeignKey(Order, related_name='items', on_delete=models.CASCADE)
    product = models.ForeignKey(Product, on_delete=models.SET_NULL, null=True, blank=True)
    # معرّف المنتج كما ورد في السلة، يبقى حتى لو حُذف المنتج
    product_ref = models.CharField(max_length=64)
    name = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(default=1)
    size = models.CharField(max_length=20, blank=True)
    color = models.CharField(max_length=50, blank=True)
    image = models.CharField(max_length=500, blank=True)

    def __str__(self):
        return f"{self.name} ({self.color} / {self.size})"

    @property
    def subtotal(self):
        return self.quantity * self.price


# --- 6. التقييمات (Reviews) ---
class Review(models.Model):
    product = models.ForeignKey(Product, related_name='reviews', on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='reviews', on_delete=models.CASCADE)
    user_name = models.CharField(max_length=150)
    user_email = models.EmailField()
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    title = models.CharField(max_length=200)
    comment = models.TextField()
    size = models.CharField(max_length=20, blank=True)
    color = models.CharField(max_length=50, blank=True)
    verified = models.BooleanField(default=False)
    helpful = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.product.name} - {self.rating}/5 by {self.user_name}"


# --- 7. الرسائل (Contact Messages) ---
class ContactMessage(models.Model):
    name = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True, null=True)
    subject = models.CharField(max_length=200)
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} - {self.subject}"
