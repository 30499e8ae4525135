"""
Cadastro de clientes e produtos
"""
