import logging
from functools import partial

from django import forms
from django.conf import settings
from django.contrib import messages
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.decorators import login_required, user_passes_test
from django.contrib.auth.models import User
from django.core.mail import send_mail
from django.db.models import Q, Sum
from django.forms import inlineformset_factory
from django.http import Http404
from django.shortcuts import get_object_or_404, redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.utils.translation import gettext as _
from django.views.decorators.http import require_POST

from . import checkout as checkout_flow
from .catalog import SORT_OPTIONS, featured_products, filter_products, new_products, related_products, sort_products
from .forms import (
    AddToCartForm, CartQuantityForm, ContactForm, PaymentForm, ProductFilterForm, ProductForm,
    ReviewForm, ShippingForm, SignupForm,
)
from .models import Category, ContactMessage, Order, Product, ProductVariant, Review
from .orders import create_order, orders_for_email, update_order_status
from .payments import PaymentError, process_payment
from .pricing import FREE_SHIPPING_THRESHOLD, compute_pricing
from .reviews import create_review, delete_review, mark_helpful, review_stats

logger = logging.getLogger(__name__)

VariantFormSet = inlineformset_factory(
    Product,
    ProductVariant,
    fields=['color_name', 'color_code', 'variant_image'],
    extra=3,
    can_delete=True,
    widgets={
        'color_code': forms.TextInput(attrs={
            'type': 'color',
            'class': 'form-control'
        }),
        'color_name': forms.TextInput(attrs={
            'placeholder': 'e.g. Black',
            'class': 'form-control'
        }),
    }
)

INFO_PAGES = {
    'about': 'pages/about.html',
    'faq': 'pages/faq.html',
    'shipping': 'pages/shipping.html',
    'returns': 'pages/returns.html',
    'privacy': 'pages/privacy.html',
    'size-guide': 'pages/size_guide.html',
}


def _redirect_back(request, fallback):
    target = request.POST.get('next') or request.META.get('HTTP_REFERER')
    if target and url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}):
        return redirect(target)
    return redirect(fallback)


# --- 1. الصفحة الرئيسية (Home) ---
def home(request):
    context = {
        'featured_products': featured_products(),
        'new_products': new_products(),
        'categories': Category.objects.all(),
    }
    return render(request, 'home.html', context)


# --- 2. صفحة المتجر (SHOP) ---
def shop_view(request, category_slug=None):
    categories = Category.objects.all()
    selected_category = None
    if category_slug:
        selected_category = get_object_or_404(Category, slug=category_slug)

    filter_form = ProductFilterForm(request.GET)
    product_filter = filter_form.to_filter(category_slug=category_slug)
    sort = filter_form.cleaned_data.get('sort') if filter_form.is_valid() else None

    all_products = Product.objects.all()
    products = sort_products(filter_products(all_products, product_filter), sort or 'newest')

    context = {
        'products': products,
        'categories': categories,
        'selected_category': selected_category,
        'filter_form': filter_form,
        'sort_options': SORT_OPTIONS,
        'current_sort': sort or 'newest',
        'total_products': all_products.count(),
    }
    return render(request, 'shop.html', context)


# --- 3. صفحة تفاصيل المنتج (Product Detail) ---
def product_detail(request, id):
    product = get_object_or_404(Product, id=id)
    context = {
        'product': product,
        'variants': product.variants.prefetch_related('sizes'),
        'reviews': product.reviews.all(),
        'review_stats': review_stats(product),
        'related_products': related_products(product),
        'cart_form': AddToCartForm(),
        'review_form': ReviewForm(),
    }
    return render(request, 'product_detail.html', context)


@login_required(login_url='login')
@require_POST
def add_review(request, product_id):
    product = get_object_or_404(Product, id=product_id)
    form = ReviewForm(request.POST)
    if form.is_valid():
        create_review(product, request.user, form.cleaned_data)
        messages.success(request, _('Thank you! Your review has been submitted.'))
    else:
        messages.error(request, _('Please check your review and try again.'))
    return redirect('product_detail', id=product.id)


@require_POST
def review_helpful(request, review_id):
    review = get_object_or_404(Review, id=review_id)
    mark_helpful(review)
    return redirect('product_detail', id=review.product_id)


# --- 4. صفحة اتصل بنا (Contact Us) ---
def contact_view(request):
    if request.method == 'POST':
        form = ContactForm(request.POST)
        if form.is_valid():
            contact = form.save()
            full_message = (
                f"New message from {contact.name}\nEmail: {contact.email}\n"
                f"Phone: {contact.phone}\n\nMessage:\n{contact.message}"
            )
            try:
                send_mail(
                    subject=f"{settings.STORE_NAME}: {contact.subject}",
                    message=full_message,
                    from_email=settings.EMAIL_HOST_USER,
                    recipient_list=[settings.EMAIL_HOST_USER],
                    fail_silently=False,
                )
                messages.success(request, _('Sent! We received your message.'))
            except Exception:
                logger.exception("Contact notification email failed")
                messages.warning(request, _('Message saved, but email notification failed.'))
            return redirect('contact')
    else:
        form = ContactForm()

    return render(request, 'contact.html', {'form': form})


# --- 5. عربة التسوق (Cart) ---

@require_POST
def add_to_cart(request, product_id):
    product = get_object_or_404(Product, id=product_id)
    form = AddToCartForm(request.POST)
    if not form.is_valid():
        messages.error(request, _('Please choose a valid quantity.'))
        return redirect('product_detail', id=product.id)

    size = form.cleaned_data['size'] or None
    color = form.cleaned_data['color'] or None

    # صورة اللون المختار أو الصورة الافتراضية
    variant = product.variants.filter(color_name=color).first() if color else None
    image_url = variant.variant_image.url if variant and variant.variant_image else (product.main_image or '')

    request.cart.add_item(
        product_id=product.id,
        name=product.display_name,
        unit_price=product.price,
        quantity=form.cleaned_data['quantity'],
        image_url=image_url,
        size=size,
        color=color,
    )
    messages.success(request, _('Added to cart!'))
    return _redirect_back(request, 'cart_view')


def cart_view(request):
    # العودة إلى السلة تعني مغادرة خطوات الدفع
    checkout_flow.discard_checkout(request.session)
    totals = request.cart.totals()
    context = {
        'cart_items': list(request.cart),
        'totals': totals,
        'pricing': compute_pricing(totals.subtotal),
        'free_shipping_threshold': FREE_SHIPPING_THRESHOLD,
    }
    return render(request, 'cart.html', context)


@require_POST
def update_cart(request):
    key = request.POST.get('key', '')
    action = request.POST.get('action')
    if action == 'increase':
        request.cart.increment(key)
    elif action == 'decrease':
        request.cart.decrement(key)
    elif action == 'set':
        form = CartQuantityForm(request.POST)
        if form.is_valid():
            request.cart.set_quantity(key, form.cleaned_data['quantity'])
    return redirect('cart_view')


@require_POST
def remove_from_cart(request):
    request.cart.remove_item(request.POST.get('key', ''))
    return redirect('cart_view')


@require_POST
def clear_cart(request):
    request.cart.clear()
    return redirect('cart_view')


# --- 6. إتمام الطلب (Checkout) ---

def _shipping_initial(user):
    if not user.is_authenticated:
        return None
    return {'first_name': user.first_name, 'last_name': user.last_name, 'email': user.email}


def checkout(request):
    session = checkout_flow.load_checkout(request.session)

    if session.is_complete:
        checkout_flow.discard_checkout(request.session)
        return render(request, 'checkout/confirmation.html', {'checkout': session})

    if len(request.cart) == 0:
        checkout_flow.discard_checkout(request.session)
        messages.warning(request, _('Your cart is empty!'))
        return redirect('shop')

    pricing = compute_pricing(request.cart.totals().subtotal)

    if session.step == checkout_flow.SHIPPING:
        if request.method == 'POST':
            form = ShippingForm(request.POST)
            if form.is_valid():
                session.submit_shipping(form.cleaned_data)
                checkout_flow.save_checkout(request.session, session)
                return redirect('checkout')
        else:
            form = ShippingForm(initial=_shipping_initial(request.user))
        template = 'checkout/shipping.html'
    else:
        if request.method == 'POST':
            form = PaymentForm(request.POST)
            if form.is_valid():
                try:
                    payment = process_payment(form.cleaned_data['payment_method'], card=form.cleaned_data)
                except PaymentError as e:
                    form.add_error('payment_method', str(e))
                else:
                    session.complete_payment(
                        payment,
                        request.cart,
                        place_order=partial(create_order, user=request.user),
                    )
                    checkout_flow.save_checkout(request.session, session)
                    return redirect('checkout')
        else:
            form = PaymentForm()
        template = 'checkout/payment.html'

    context = {
        'form': form,
        'checkout': session,
        'steps': checkout_flow.STEPS,
        'cart_items': list(request.cart),
        'pricing': pricing,
        'free_shipping_threshold': FREE_SHIPPING_THRESHOLD,
    }
    return render(request, template, context)


# --- 7. لوحة تحكم الإدارة (Back-office) ---

def is_admin(user):
    return user.is_active and user.is_staff


@user_passes_test(is_admin, login_url='login')
def dashboard_view(request):
    orders = Order.objects.all()
    products = Product.objects.all()

    revenue = orders.filter(status=Order.STATUS_DELIVERED).aggregate(total=Sum('total'))['total'] or 0

    context = {
        'orders': orders[:10],
        'products': products,
        'messages_list': ContactMessage.objects.order_by('-created_at')[:10],
        'orders_count': orders.count(),
        'pending_orders': orders.filter(status=Order.STATUS_PENDING).count(),
        'shipped_orders': orders.filter(status=Order.STATUS_SHIPPED).count(),
        'delivered_orders': orders.filter(status=Order.STATUS_DELIVERED).count(),
        'products_count': products.count(),
        'users_count': User.objects.count(),
        'total_revenue': revenue,
    }
    return render(request, 'dashboard/index.html', context)


@user_passes_test(is_admin, login_url='login')
def add_product(request):
    if request.method == 'POST':
        form = ProductForm(request.POST, request.FILES)
        formset = VariantFormSet(request.POST, request.FILES)
        if form.is_valid() and formset.is_valid():
            product = form.save()
            formset.instance = product
            formset.save()
            messages.success(request, _('Product and colors added! Go to Admin to add sizes.'))
            return redirect('dashboard')
    else:
        form = ProductForm()
        formset = VariantFormSet()

    return render(request, 'dashboard/manage_product.html', {
        'form': form,
        'formset': formset,
        'title': _('Add New Product'),
    })


@user_passes_test(is_admin, login_url='login')
def edit_product(request, pk):
    product = get_object_or_404(Product, pk=pk)
    if request.method == 'POST':
        form = ProductForm(request.POST, request.FILES, instance=product)
        formset = VariantFormSet(request.POST, request.FILES, instance=product)
        if form.is_valid() and formset.is_valid():
            form.save()
            formset.save()
            product.update_total_stock()
            messages.success(request, _('Product updated successfully!'))
            return redirect('dashboard')
    else:
        form = ProductForm(instance=product)
        formset = VariantFormSet(instance=product)

    return render(request, 'dashboard/manage_product.html', {
        'form': form,
        'formset': formset,
        'title': f"{_('Edit')}: {product.name}",
    })


@user_passes_test(is_admin, login_url='login')
@require_POST
def delete_product(request, pk):
    product = get_object_or_404(Product, pk=pk)
    product.delete()
    messages.error(request, _('Product has been deleted!'))
    return redirect('dashboard')


@user_passes_test(is_admin, login_url='login')
def orders_admin(request):
    orders = Order.objects.prefetch_related('items')
    status = request.GET.get('status')
    if status:
        orders = orders.filter(status=status)
    return render(request, 'dashboard/orders.html', {
        'orders': orders,
        'status_choices': Order.STATUS_CHOICES,
        'current_status': status,
    })


@user_passes_test(is_admin, login_url='login')
@require_POST
def order_status_view(request, pk):
    get_object_or_404(Order, pk=pk)
    try:
        update_order_status(pk, request.POST.get('status'))
        messages.success(request, _('Order status updated.'))
    except ValueError:
        messages.error(request, _('Unknown order status.'))
    return redirect('orders_admin')


@user_passes_test(is_admin, login_url='login')
def users_admin(request):
    users = User.objects.annotate(total_spent=Sum('orders__total')).order_by('-date_joined')
    query = request.GET.get('q', '').strip()
    if query:
        users = users.filter(
            Q(username__icontains=query) | Q(email__icontains=query)
            | Q(first_name__icontains=query) | Q(last_name__icontains=query)
        )
    return render(request, 'dashboard/users.html', {'users': users, 'query': query})


@user_passes_test(is_admin, login_url='login')
@require_POST
def toggle_user_role(request, pk):
    user = get_object_or_404(User, pk=pk)
    if user == request.user:
        messages.error(request, _('You cannot change your own role.'))
    else:
        user.is_staff = not user.is_staff
        user.save(update_fields=['is_staff'])
    return redirect('users_admin')


@user_passes_test(is_admin, login_url='login')
@require_POST
def toggle_user_active(request, pk):
    user = get_object_or_404(User, pk=pk)
    if user == request.user:
        messages.error(request, _('You cannot deactivate your own account.'))
    else:
        user.is_active = not user.is_active
        user.save(update_fields=['is_active'])
    return redirect('users_admin')


@user_passes_test(is_admin, login_url='login')
@require_POST
def remove_review(request, review_id):
    review = get_object_or_404(Review, id=review_id)
    product_id = review.product_id
    delete_review(review)
    messages.success(request, _('Review deleted.'))
    return redirect('product_detail', id=product_id)


# --- 8. تسجيل الدخول والاشتراك ---

def login_view(request):
    if request.method == 'POST':
        username = request.POST.get('username')
        password = request.POST.get('password')
        user = authenticate(request, username=username, password=password)
        if user:
            login(request, user)
            messages.success(request, _('Welcome back, %(name)s!') % {'name': username})
            next_url = request.GET.get('next')
            if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
                return redirect(next_url)
            return redirect('home')
        else:
            messages.error(request, _('Invalid username or password'))
    return render(request, 'login.html')


def signup_view(request):
    if request.method == 'POST':
        form = SignupForm(request.POST)
        if form.is_valid():
            form.save()
            messages.success(request, _('Account created! Please login.'))
            return redirect('login')
    else:
        form = SignupForm()
    return render(request, 'signup.html', {'form': form})


def logout_view(request):
    logout(request)
    return redirect('home')


@login_required(login_url='login')
def profile_view(request):
    orders = orders_for_email(request.user.email) if request.user.email else Order.objects.filter(user=request.user)
    return render(request, 'profile.html', {'orders': orders})


# --- 9. صفحات إضافية ---

def page_view(request, slug):
    template = INFO_PAGES.get(slug)
    if template is None:
        raise Http404("Page not found")
    return render(request, template)
