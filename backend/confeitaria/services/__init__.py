"""
Serviços de domínio
"""
