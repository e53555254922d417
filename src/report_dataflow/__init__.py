# src/report_dataflow/__init__.py
"""
Report DataFlow — pipeline reprodutível de planilha para relatório.

Este pacote raiz define o namespace público do Report DataFlow, um
pipeline determinístico que transforma uma pasta de trabalho (workbook)
com uma planilha por período em tabelas prontas para apresentação.

Fluxo canônico:
    - workbook          → enumeração de planilhas e leitura tipada por contrato
    - tables            → união, enriquecimento por categoria, agregação e
                          variação período-a-período
    - steps             → Steps canônicos que orquestram as operações acima
    - core              → config, contrato, engine e rastreabilidade (Manifest)

Princípios centrais:
    - Toda execução recomputa tudo a partir do arquivo bruto
    - A mesma entrada sempre produz as mesmas tabelas
    - Configuração e contrato são explícitos e versionáveis

Limites explícitos:
    - Não renderiza gráficos nem publica relatórios
    - Não mantém estado entre execuções
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
