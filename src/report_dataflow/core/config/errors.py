# src/report_dataflow/core/config/errors.py
"""
Erros canônicos da camada de configuração.

Todas as falhas de configuração são estruturais e fatais: um run nunca
começa com uma configuração parcialmente resolvida.
"""


class ConfigError(Exception):
    """
    Erro base da camada de configuração.

    Limites explícitos:
        - Não representa erro de leitura do workbook
        - Não representa erro de execução do pipeline
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    O arquivo de defaults é obrigatório; ele nunca é criado ou inferido
    automaticamente.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo de configuração não suportada.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um mapa (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo:
        - base:     {"engine": {"fail_fast": true}}
        - override: {"engine": "DEBUG"}

    Nenhum merge parcial é produzido em caso de conflito.
    """
