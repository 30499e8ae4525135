"""
Pedidos: urgência, status, sinal e lançamentos derivados
"""
