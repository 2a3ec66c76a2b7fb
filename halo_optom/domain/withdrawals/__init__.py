"""withdrawals domain"""
