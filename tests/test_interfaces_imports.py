def test_can_import_all_protocols():
    # Import must succeed and expose the expected names
    import rbmerge.core.interfaces as I

    assert hasattr(I, "LoggerFactoryProtocol")
    assert hasattr(I, "LoggerLikeProtocol")
    assert hasattr(I, "MergeEngineProtocol")
    assert hasattr(I, "ParserProtocol")
    assert hasattr(I, "RendererProtocol")


def test_concrete_classes_satisfy_protocols():
    from rbmerge.core.interfaces import (
        LoggerFactoryProtocol,
        MergeEngineProtocol,
        ParserProtocol,
        RendererProtocol,
    )
    from rbmerge.logging.factory import DefaultLoggerFactory
    from rbmerge.merging.engine import MergeEngine
    from rbmerge.parsing.parser import StatementParser
    from rbmerge.rendering.renderer import Renderer

    assert isinstance(StatementParser(), ParserProtocol)
    assert isinstance(MergeEngine(), MergeEngineProtocol)
    assert isinstance(Renderer(), RendererProtocol)
    assert isinstance(DefaultLoggerFactory(), LoggerFactoryProtocol)


def test_engine_merge_returns_statements():
    from rbmerge.core.models import StatementKind
    from rbmerge.merging.engine import MergeEngine
    from rbmerge.merging.strategies import Strategy
    from rbmerge.parsing.parser import parse

    out = MergeEngine().merge(parse('gem "a"\n'), parse('gem "b"\n'), Strategy.MERGE)
    assert [s.kind for s in out] == [StatementKind.CALL, StatementKind.CALL]
    assert [s.primary_argument for s in out] == ["b", "a"]
