from django import forms
from django.contrib.auth.models import User
from django.core.validators import RegexValidator
from django.utils.translation import gettext_lazy as _

from .catalog import SORT_OPTIONS, ProductFilter
from .models import Category, ContactMessage, Order, Product, ProductSize, Review

# نفس النمط البسيط المستخدم في واجهة الدفع
email_pattern = RegexValidator(r'\S+@\S+\.\S+', message=_('Please enter a valid email address'))


class ProductForm(forms.ModelForm):
    class Meta:
        model = Product
        fields = [
            'name', 'name_ar', 'category', 'description', 'description_ar',
            'price', 'original_price', 'material', 'tags', 'is_new', 'is_featured',
        ]


class AddToCartForm(forms.Form):
    quantity = forms.IntegerField(min_value=1, initial=1)
    size = forms.CharField(max_length=20, required=False)
    color = forms.CharField(max_length=50, required=False)


class CartQuantityForm(forms.Form):
    quantity = forms.IntegerField()


class ShippingForm(forms.Form):
    first_name = forms.CharField(max_length=100, error_messages={'required': _('First name is required')})
    last_name = forms.CharField(max_length=100, error_messages={'required': _('Last name is required')})
    email = forms.CharField(
        max_length=254,
        validators=[email_pattern],
        error_messages={'required': _('Email is required')},
    )
    phone = forms.CharField(max_length=20, error_messages={'required': _('Phone number is required')})
    address = forms.CharField(max_length=255, error_messages={'required': _('Address is required')})
    city = forms.CharField(max_length=100, error_messages={'required': _('City is required')})
    postal_code = forms.CharField(max_length=20, error_messages={'required': _('Postal code is required')})
    country = forms.CharField(max_length=100, initial='Saudi Arabia', disabled=True, required=False)
    notes = forms.CharField(widget=forms.Textarea(attrs={'rows': 3}), required=False)
    save_info = forms.BooleanField(required=False)


class PaymentForm(forms.Form):
    payment_method = forms.ChoiceField(choices=Order.PAYMENT_CHOICES, initial='apple_pay', widget=forms.RadioSelect)
    card_number = forms.CharField(max_length=23, required=False)
    card_name = forms.CharField(max_length=100, required=False)
    expiry_date = forms.CharField(max_length=5, required=False)
    cvv = forms.CharField(max_length=4, required=False, widget=forms.PasswordInput)

    def clean(self):
        cleaned = super().clean()
        if cleaned.get('payment_method') == 'credit_card':
            for name in ('card_number', 'card_name', 'expiry_date', 'cvv'):
                if not cleaned.get(name):
                    self.add_error(name, _('This field is required for card payments'))
        return cleaned


class ProductFilterForm(forms.Form):
    q = forms.CharField(required=False)
    category = forms.ModelChoiceField(
        queryset=Category.objects.all(), to_field_name='slug', required=False,
    )
    sizes = forms.MultipleChoiceField(choices=ProductSize.SIZE_CHOICES, required=False)
    colors = forms.CharField(required=False, help_text="Comma separated")
    materials = forms.MultipleChoiceField(choices=Product.MATERIAL_CHOICES, required=False)
    min_price = forms.DecimalField(min_value=0, required=False)
    max_price = forms.DecimalField(min_value=0, required=False)
    in_stock = forms.BooleanField(required=False)
    is_new = forms.BooleanField(required=False)
    is_featured = forms.BooleanField(required=False)
    sort = forms.ChoiceField(choices=SORT_OPTIONS, required=False)

    def to_filter(self, category_slug=None):
        data = self.cleaned_data if self.is_valid() else {}
        category = data.get('category')
        colors = [c.strip() for c in (data.get('colors') or '').split(',') if c.strip()]
        return ProductFilter(
            category=category_slug or (category.slug if category else None),
            sizes=data.get('sizes') or [],
            colors=colors,
            materials=data.get('materials') or [],
            min_price=data.get('min_price'),
            max_price=data.get('max_price'),
            in_stock=bool(data.get('in_stock')),
            is_new=bool(data.get('is_new')),
            is_featured=bool(data.get('is_featured')),
            search=(data.get('q') or '').strip(),
        )


class ReviewForm(forms.ModelForm):
    rating = forms.TypedChoiceField(choices=[(r, r) for r in range(1, 6)], coerce=int)

    class Meta:
        model = Review
        fields = ['rating', 'title', 'comment', 'size', 'color']


class ContactForm(forms.ModelForm):
    class Meta:
        model = ContactMessage
        fields = ['name', 'email', 'phone', 'subject', 'message']


class SignupForm(forms.ModelForm):
    password = forms.CharField(widget=forms.PasswordInput, min_length=8)

    class Meta:
        model = User
        fields = ['username', 'email', 'first_name', 'last_name']

    def save(self, commit=True):
        user = super().save(commit=False)
        user.set_password(self.cleaned_data['password'])
        if commit:
            user.save()
        return user
