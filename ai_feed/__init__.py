"""
AI product feed service for WooCommerce.
"""
