# tests/test_smoke.py
"""
Testes de sanidade estrutural (smoke tests) do Atlas XDS.

Garantem apenas que o pacote importa, expõe a versão e que a CLI monta o
parser sem erros. Não validam comportamento de domínio.
"""

import atlas_xds
from atlas_xds.cli import build_parser


def test_smoke():
    assert atlas_xds.__version__ == "0.1.0"


def test_cli_parser_builds():
    parser = build_parser()
    args = parser.parse_args(["check-names", "build"])
    assert args.command == "check-names"
    assert args.build_dir == "build"
