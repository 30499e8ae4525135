"""
Confeitaria: ciclo de vida de pedidos e conciliação financeira
"""
