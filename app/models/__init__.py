from app.models.seller import Seller
from app.models.product import Product, Variation, ProductVariation
from app.models.order import Order, OrderItem, OrderStatus
