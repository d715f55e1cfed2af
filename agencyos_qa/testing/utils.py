"""
Utilitarios para o runner de cenarios.

Inclui:
- Logging configuravel
- Erros de validacao e de execucao de steps
- Espera limitada por condicao (polling com teto de tempo)
- Helpers de tempo e sanitizacao
"""

import asyncio
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Optional, Union
from urllib.parse import urlparse

import httpx


# Configuracao de logging
def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Retorna um logger configurado para o modulo.

    Args:
        name: Nome do logger (geralmente __name__)
        level: Nivel de logging (default: INFO)

    Returns:
        Logger configurado
    """
    if not name.startswith("agencyos_qa"):
        name = f"agencyos_qa.{name}"
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


logger = get_logger(__name__)


# Validacao de dados
class ValidationError(Exception):
    """Excecao para erros de validacao."""
    pass


def validate_url(url: str, require_https: bool = False) -> str:
    """
    Valida e normaliza uma URL.

    Args:
        url: URL a validar
        require_https: Se True, requer HTTPS

    Returns:
        URL normalizada, sem barra final

    Raises:
        ValidationError: Se URL invalida
    """
    if not url:
        raise ValidationError("URL nao pode ser vazia")

    # Adiciona schema se nao tiver
    if not url.startswith(('http://', 'https://')):
        url = f"http://{url}"

    parsed = urlparse(url)

    if not parsed.netloc:
        raise ValidationError(f"URL invalida: {url}")

    if require_https and parsed.scheme != 'https':
        raise ValidationError(f"URL deve usar HTTPS: {url}")

    return url.rstrip("/")


def validate_positive(value: Union[int, float], field_name: str) -> Union[int, float]:
    """
    Valida que um numero e positivo.

    Raises:
        ValidationError: Se valor nao positivo
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} deve ser numero, recebeu {type(value)}")

    if value <= 0:
        raise ValidationError(f"{field_name} deve ser positivo, recebeu {value}")

    return value


def validate_in_range(
    value: Union[int, float],
    field_name: str,
    min_value: Optional[Union[int, float]] = None,
    max_value: Optional[Union[int, float]] = None,
) -> Union[int, float]:
    """
    Valida que um numero esta dentro de um range.

    Args:
        value: Valor a validar
        field_name: Nome do campo
        min_value: Valor minimo (inclusive)
        max_value: Valor maximo (inclusive)

    Raises:
        ValidationError: Se fora do range
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} deve ser numero")

    if min_value is not None and value < min_value:
        raise ValidationError(f"{field_name} deve ser >= {min_value}, recebeu {value}")

    if max_value is not None and value > max_value:
        raise ValidationError(f"{field_name} deve ser <= {max_value}, recebeu {value}")

    return value


# Erros de execucao de steps
class StepError(Exception):
    """Falha irrecuperavel de um step (registrada como step falho)."""
    pass


class ElementNotFoundError(StepError):
    """Seletor nao encontrou nenhum elemento dentro do timeout."""
    pass


class ElementNotInteractableError(StepError):
    """Elemento existe mas esta oculto ou desabilitado."""
    pass


class StepTimeoutError(StepError, TimeoutError):
    """Condicao nao foi atingida dentro do teto de espera."""
    pass


# Espera limitada
async def wait_until(
    predicate: Callable[[], Union[Any, Awaitable[Any]]],
    timeout: float,
    interval: float = 0.25,
    description: str = "condicao",
) -> Any:
    """
    Faz polling de um predicado ate ele retornar valor verdadeiro.

    Substitui esperas de duracao fixa: retorna assim que a condicao
    e satisfeita e nunca bloqueia alem de `timeout`. Excecoes do
    predicado contam como "ainda nao".

    Args:
        predicate: Funcao sync ou async avaliada a cada tentativa
        timeout: Teto de espera em segundos
        interval: Intervalo entre tentativas em segundos
        description: Texto usado na mensagem de timeout

    Returns:
        O primeiro valor verdadeiro retornado pelo predicado

    Raises:
        StepTimeoutError: Se o teto for atingido
    """
    deadline = time.monotonic() + timeout

    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break

        try:
            result = predicate()
            if inspect.isawaitable(result):
                result = await asyncio.wait_for(result, timeout=remaining)
        except Exception as e:
            logger.debug(f"Predicado falhou aguardando {description}: {e}")
            result = None

        if result:
            return result

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        await asyncio.sleep(min(interval, remaining))

    raise StepTimeoutError(f"Timeout de {timeout}s aguardando {description}")


async def wait_for_app(base_url: str, timeout: float = 30.0, interval: float = 1.0) -> int:
    """
    Aguarda a aplicacao responder em `base_url`.

    Qualquer resposta abaixo de 500 conta como "no ar".

    Returns:
        Status HTTP da primeira resposta aceita
    """
    async with httpx.AsyncClient(timeout=interval * 5, follow_redirects=True) as client:
        async def responds():
            try:
                response = await client.get(base_url)
            except httpx.HTTPError as e:
                logger.debug(f"{base_url} ainda indisponivel: {e}")
                return None
            return response.status_code if response.status_code < 500 else None

        return await wait_until(responds, timeout, interval, description=f"aplicacao em {base_url}")


# Context managers
class TimingContext:
    """Context manager para medir tempo de execucao."""

    def __init__(self, name: str = "operation", logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger
        self.start_time = None
        self.end_time = None
        self.duration_ms = 0

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.time()
        self.duration_ms = int((self.end_time - self.start_time) * 1000)

        if self.logger:
            self.logger.debug(f"{self.name} completed in {self.duration_ms}ms")

        return False


# Sanitizacao
def sanitize_filename(filename: str) -> str:
    """
    Sanitiza um nome de arquivo removendo caracteres invalidos.
    """
    invalid_chars = '<>:"/\\|?* '
    for char in invalid_chars:
        filename = filename.replace(char, '_')
    return filename.strip('_')


def truncate_string(s: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Trunca uma string mantendo um sufixo.
    """
    if len(s) <= max_length:
        return s
    return s[:max_length - len(suffix)] + suffix
