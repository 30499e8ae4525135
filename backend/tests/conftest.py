"""
Configuração comum dos testes
"""

import os
import sys
from pathlib import Path

# Banco em memória para que importar a aplicação não crie arquivos
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))
