"""auth domain"""
