from django.urls import path
from . import views

urlpatterns = [
    # --- الصفحات العامة ---
    path('', views.home, name='home'),
    path('login/', views.login_view, name='login'),
    path('signup/', views.signup_view, name='signup'),
    path('logout/', views.logout_view, name='logout'),
    path('profile/', views.profile_view, name='profile'),
    path('contact/', views.contact_view, name='contact'),
    path('pages/<slug:slug>/', views.page_view, name='page'),

    # --- لوحة تحكم المسؤول (Dashboard) ---
    path('dashboard/', views.dashboard_view, name='dashboard'),
    path('dashboard/add-product/', views.add_product, name='add_product'),
    path('dashboard/delete-product/<int:pk>/', views.delete_product, name='delete_product'),
    path('dashboard/edit-product/<int:pk>/', views.edit_product, name='edit_product'),
    path('dashboard/orders/', views.orders_admin, name='orders_admin'),
    path('dashboard/orders/<int:pk>/status/', views.order_status_view, name='order_status'),
    path('dashboard/users/', views.users_admin, name='users_admin'),
    path('dashboard/users/<int:pk>/role/', views.toggle_user_role, name='toggle_user_role'),
    path('dashboard/users/<int:pk>/active/', views.toggle_user_active, name='toggle_user_active'),
    path('dashboard/reviews/<int:review_id>/delete/', views.remove_review, name='remove_review'),

    # --- المتجر والمنتجات ---
    path('shop/', views.shop_view, name='shop'),
    path('shop/<slug:category_slug>/', views.shop_view, name='shop_by_category'),
    path('product/<int:id>/', views.product_detail, name='product_detail'),
    path('product/<int:product_id>/review/', views.add_review, name='add_review'),
    path('reviews/<int:review_id>/helpful/', views.review_helpful, name='review_helpful'),

    # --- عربة التسوق (Cart) ---
    path('cart/', views.cart_view, name='cart_view'),
    path('cart/add/<int:product_id>/', views.add_to_cart, name='add_to_cart'),
    # مفتاح السطر (مثل 12|M|Black) يُرسل في جسم الطلب
    path('cart/update/', views.update_cart, name='update_cart'),
    path('cart/remove/', views.remove_from_cart, name='remove_from_cart'),
    path('cart/clear/', views.clear_cart, name='clear_cart'),

    # --- إتمام الطلب ---
    path('checkout/', views.checkout, name='checkout'),
]
