"""orders domain"""
