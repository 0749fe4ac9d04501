from typing import TYPE_CHECKING, Any, AsyncGenerator, Generator, Self

from src.platform.logging.loguru_io_config import GeneratorMethod
from src.platform.logging.loguru_io_utils import reset_call_depth


if TYPE_CHECKING:
    from src.platform.logging.loguru_io import LoguruIO


class GeneratorWrapper:
    """Logs every item a decorated sync generator yields"""

    def __init__(self, gen_obj: Generator[Any, Any, Any], io_logger: 'LoguruIO') -> None:
        self.gen_obj = gen_obj
        self._io_logger = io_logger

    def __iter__(self) -> Self:
        return self

    def __next__(self) -> Any:
        return self.send(None)

    def send(self, value: Any) -> Any:
        method = GeneratorMethod.NEXT if value is None else GeneratorMethod.SEND
        try:
            self._io_logger.log_args_kwargs_content(value, yield_method=method)
            out = self.gen_obj.send(value)
            self._io_logger.log_return_content(out, yield_method=method)
            return out
        except StopIteration as e:
            self._io_logger.log_return_content(e.value, yield_method=method)
            raise
        finally:
            reset_call_depth()

    def close(self) -> None:
        self.gen_obj.close()


class AsyncGeneratorWrapper:
    """Async counterpart of GeneratorWrapper, used for streamed query results"""

    def __init__(self, agen_obj: AsyncGenerator[Any, Any], io_logger: 'LoguruIO') -> None:
        self.agen_obj = agen_obj
        self._io_logger = io_logger

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> Any:
        try:
            self._io_logger.log_args_kwargs_content(None, yield_method=GeneratorMethod.NEXT)
            out = await self.agen_obj.__anext__()
            self._io_logger.log_return_content(out, yield_method=GeneratorMethod.NEXT)
            return out
        finally:
            reset_call_depth()

    async def aclose(self) -> None:
        await self.agen_obj.aclose()
