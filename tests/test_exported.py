"""
Tests for the process-wide default Logger and forwarding functions.
"""

import threading

import pytest

import fieldlog
from fieldlog.core import Logger
from fieldlog.records import Level, PanicError


class CaptureSink:
    def __init__(self):
        self.writes: list[bytes] = []

    def write(self, data):
        self.writes.append(bytes(data))


@pytest.fixture(autouse=True)
def reset_logger():
    """Reset the default Logger before and after each test."""
    Logger.reset()
    yield
    Logger.reset()


class TestDefaultLogger:
    def test_singleton_identity(self):
        assert fieldlog.standard_logger() is Logger.instance()
        assert Logger.instance() is Logger.instance()

    def test_reset_creates_new_instance(self):
        a = Logger.instance()
        Logger.reset()
        assert Logger.instance() is not a

    def test_thread_safe_singleton(self):
        instances = []

        def get_instance():
            instances.append(Logger.instance())

        threads = [threading.Thread(target=get_instance) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(inst is instances[0] for inst in instances)


class TestForwarding:
    def test_set_output_and_log(self):
        sink = CaptureSink()
        fieldlog.set_output(sink)
        fieldlog.set_formatter(fieldlog.JsonFormatter(disable_timestamp=True))
        fieldlog.with_field("user", "a").info("hello")
        assert len(sink.writes) == 1
        assert b'"user": "a"' in sink.writes[0]

    def test_level_functions(self):
        fieldlog.set_output(CaptureSink())
        fieldlog.set_level("error")
        assert fieldlog.get_level() == Level.ERROR
        assert not Logger.instance().is_level_enabled(Level.WARN)

    def test_severity_functions(self):
        from fieldlog import exported

        sink = CaptureSink()
        fieldlog.set_output(sink)
        fieldlog.set_level(Level.TRACE)
        exported.trace("t")
        exported.debug("d")
        exported.info("i")
        exported.warning("w")
        exported.error("e")
        exported.infof("%d", 1)
        exported.errorf("%d", 2)
        assert len(sink.writes) == 7
        with pytest.raises(PanicError):
            exported.panic("p")

    def test_formatted_and_spaced_variants(self):
        from fieldlog import exported

        sink = CaptureSink()
        fieldlog.set_output(sink)
        fieldlog.set_formatter(fieldlog.JsonFormatter(disable_timestamp=True))
        fieldlog.set_level(Level.TRACE)
        exported.tracef("%s", "t")
        exported.debugf("%s", "d")
        exported.warnf("%s", "w")
        exported.printf("%s", "p")
        exported.traceln("a", 1)
        exported.debugln("a", 2)
        exported.infoln("a", 3)
        exported.warnln("a", 4)
        exported.errorln("a", 5)
        exported.println("a", 6)
        exported.warn("plain")
        exported.print("plain")
        exported.log(Level.INFO, "x")
        exported.logf(Level.INFO, "%d", 7)
        exported.logln(Level.INFO, "y", 8)
        assert len(sink.writes) == 15
        assert b'"message": "a 5"' in sink.writes[8]
        with pytest.raises(PanicError):
            exported.panicf("%s", "p")
        with pytest.raises(PanicError):
            exported.panicln("p", 1)

    def test_fatal_variants_exit(self):
        from fieldlog import exported

        codes = []
        fieldlog.set_output(CaptureSink())
        Logger.instance().exit_func = codes.append
        exported.fatal("f")
        exported.fatalf("%s", "f")
        exported.fatalln("f")
        assert codes == [1, 1, 1]

    def test_is_level_enabled_exported(self):
        fieldlog.set_level(Level.WARN)
        assert fieldlog.is_level_enabled(Level.ERROR)
        assert not fieldlog.is_level_enabled(Level.INFO)

    def test_caller_skips_forwarding_layer(self):
        from fieldlog import exported

        sink = CaptureSink()
        fieldlog.set_output(sink)
        fieldlog.set_report_caller(True)
        fieldlog.set_formatter(fieldlog.JsonFormatter())
        exported.info("where")
        assert b"test_caller_skips_forwarding_layer" in sink.writes[0]

    def test_add_hook(self):
        seen = []

        class Capture(fieldlog.Hook):
            def levels(self):
                return [Level.INFO]

            def fire(self, entry):
                seen.append(entry.message)

        fieldlog.set_output(CaptureSink())
        fieldlog.add_hook(Capture())
        fieldlog.with_fields({"a": 1}).info("hooked")
        assert seen == ["hooked"]
