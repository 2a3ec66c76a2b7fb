"""products domain"""
