"""
Financeiro: categorias, períodos e agregação
"""
