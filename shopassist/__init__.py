"""ShopAssist customer-support message router."""

__version__ = "0.3.0"
