"""
Contexto dos modelos de mensagem
"""
