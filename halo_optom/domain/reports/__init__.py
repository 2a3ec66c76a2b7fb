"""reports domain"""
