"""
Rotas e schemas da API
"""
