"""
Modulo de execucao de cenarios.

Exporta:
- BaseExecutor: Interface abstrata para executores
- PlaywrightExecutor: Execucao com Playwright
- StepInterpreter: Traduz steps em chamadas a pagina
- FixtureFiles: Arquivos transientes para steps de upload
"""

from agencyos_qa.testing.execution.base_executor import BaseExecutor
from agencyos_qa.testing.execution.fixtures import FixtureFiles
from agencyos_qa.testing.execution.interpreter import StepInterpreter, StepOutcome
from agencyos_qa.testing.execution.playwright_executor import PlaywrightExecutor

__all__ = [
    "BaseExecutor",
    "FixtureFiles",
    "PlaywrightExecutor",
    "StepInterpreter",
    "StepOutcome",
]
