"""bank accounts domain"""
