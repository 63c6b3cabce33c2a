from .logging import LoggerFactoryProtocol, LoggerLikeProtocol
from .merge import MergeEngineProtocol
from .parse import ParserProtocol
from .render import RendererProtocol

__all__ = [
    'LoggerFactoryProtocol',
    'LoggerLikeProtocol',
    'MergeEngineProtocol',
    'ParserProtocol',
    'RendererProtocol',
]
