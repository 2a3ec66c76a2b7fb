"""videosdk domain"""
