"""
Configuração, registros de domínio e utilitários de dinheiro/data
"""
