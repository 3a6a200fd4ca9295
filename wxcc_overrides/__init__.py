"""WxCC override console backend"""
