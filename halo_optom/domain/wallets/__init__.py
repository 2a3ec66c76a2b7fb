"""wallets domain"""
