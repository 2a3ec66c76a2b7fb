"""users domain"""
