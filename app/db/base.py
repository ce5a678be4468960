from app.db.base_class import Base


# IMPORT ALL MODELS HERE (THIS REGISTERS THEM WITH Base.metadata)
from app.models.seller import Seller
from app.models.product import Product, Variation, ProductVariation
from app.models.order import Order, OrderItem
