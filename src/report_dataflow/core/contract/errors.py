"""Erros canônicos do domínio de Contract.

O contrato descreve o schema de cada planilha; sem ele não existe leitura
tipada. Falhas de carregamento/validação são explícitas e estáveis.
"""


class ContractError(Exception):
    """Erro base do domínio de contrato."""


class ContractPathMissingError(ContractError):
    """Config não possui `contract.path`."""


class ContractFileNotFoundError(ContractError):
    """Arquivo de contrato não existe no caminho informado."""


class UnsupportedContractFormatError(ContractError):
    """Formato de contrato não suportado (v1: YAML/JSON)."""


class ContractParseError(ContractError):
    """Falha ao parsear YAML/JSON."""


class ContractValidationError(ContractError):
    """Contrato não é estruturalmente válido segundo o schema canônico."""
