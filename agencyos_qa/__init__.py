"""
AgencyOS QA - verificacoes operacionais do AgencyOS

Modulos:
- testing: Runner de cenarios de UI com Playwright
- backend: Inspecao e seed do projeto Supabase
- config: Configuracao do runner, contas de teste e credenciais
- cli: Entry point `agencyos-qa`
"""

__version__ = "0.1.0"

from . import testing
from . import config

__all__ = ["testing", "config", "__version__"]
