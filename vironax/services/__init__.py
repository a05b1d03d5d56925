"""Analytics and order services"""
