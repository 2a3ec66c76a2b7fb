"""medical records domain"""
