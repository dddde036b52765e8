"""路由包"""
