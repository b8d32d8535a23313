from .organization import Organization, User
from .pricing_settings import PricingSettingsRecord
from .customer import Customer
from .product import Product
from .quote import Quote, QuoteItem

__all_models = [Organization, User, PricingSettingsRecord, Customer, Product, Quote, QuoteItem]
