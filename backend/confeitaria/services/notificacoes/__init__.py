"""
Notificações derivadas de clientes e pedidos
"""
