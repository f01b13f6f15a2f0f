"""
Cookbook Backend
Capture, normalize, store and browse recipes
"""
