import asyncio
import json
import logging
import time
from typing import Awaitable, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from kvlists.models.exceptions import AlreadyExistsError, KVListsError, NotFoundError

from .request import Request
from .response import Response, error_response

logger = logging.getLogger()

Handler = Callable[[Request], Awaitable[object]]

STATUS_MESSAGES = {
    200: 'OK',
    201: 'Created',
    204: 'No Content',
    400: 'Bad Request',
    404: 'Not Found',
    405: 'Method Not Allowed',
    413: 'Payload Too Large',
    500: 'Internal Server Error',
}

# Checked in order, first match wins
ERROR_STATUSES: List[Tuple[type, int]] = [
    (NotFoundError, 404),
    (AlreadyExistsError, 400),
    (ValueError, 400),
    (KVListsError, 500),
]


class HTTPServer:
    # Request body limit (10MB)
    MAX_BODY_BYTES = 10 * 1024 * 1024

    def __init__(self, host: str = '0.0.0.0', port: int = 8080):
        self.host = host
        self.port = port
        self.routes: Dict[Tuple[str, str], Handler] = {}

    def route(self, path: str, methods: Optional[List] = None):
        """Decorator for registering route handlers"""
        if methods is None:
            methods = ['GET']

        def decorator(handler):
            for method in methods:
                self.routes[(method.upper(), path)] = handler
            return handler
        return decorator

    async def parse_request(self, reader: asyncio.StreamReader) -> Optional[Request]:
        """Parse HTTP request with timeout and size limits"""
        try:
            request_line = await asyncio.wait_for(reader.readline(), timeout=5.0)
            if not request_line:
                return None

            method, full_path, version = request_line.decode('utf-8').strip().split(' ', 2)

            parsed_url = urlparse(full_path)
            query_params = parse_qs(parsed_url.query)

            headers = {}
            while True:
                line = await asyncio.wait_for(reader.readline(), timeout=5.0)
                if line in (b'\r\n', b'\n', b''):
                    break

                header_line = line.decode('utf-8').strip()
                if ':' in header_line:
                    key, value = header_line.split(':', 1)
                    headers[key.strip().lower()] = value.strip()

            body = b''
            content_length = int(headers.get('content-length', 0))
            if content_length > self.MAX_BODY_BYTES:
                raise ValueError(f"Request body too large: {content_length} bytes")
            if content_length > 0:
                body = await asyncio.wait_for(
                    reader.readexactly(content_length),
                    timeout=30.0
                )

            return Request(
                method=method.upper(),
                path=parsed_url.path,
                headers=headers,
                query_params=query_params,
                body=body,
                version=version
            )

        except asyncio.TimeoutError:
            return None
        except (ValueError, UnicodeDecodeError, asyncio.IncompleteReadError) as e:
            logger.error(f"Error parsing request: {e}")
            return None

    def build_response(self, response: Response) -> bytes:
        """Build HTTP response bytes"""
        status_text = STATUS_MESSAGES.get(response.status, 'Unknown')

        if 'content-type' not in response.headers:
            response.headers['content-type'] = 'text/plain'

        response.headers['content-length'] = str(len(response.body))
        response.headers['connection'] = 'keep-alive'
        response.headers['server'] = 'KVListsHttp/1.0'

        response_line = f"HTTP/1.1 {response.status} {status_text}\r\n"
        header_lines = ''.join(
            f"{key}: {value}\r\n"
            for key, value in response.headers.items()
        )

        return response_line.encode() + header_lines.encode() + b'\r\n' + response.body

    def error_status(self, error: Exception) -> int:
        for error_type, status in ERROR_STATUSES:
            if isinstance(error, error_type):
                return status
        return 500

    async def handle_request(self, request: Request) -> Response:
        """Route request to appropriate handler"""
        handler = self.routes.get((request.method, request.path))

        if handler is None:
            if any(path == request.path for _, path in self.routes):
                return error_response(405, f"Method {request.method} not allowed on {request.path}")
            return error_response(404, f"Route {request.path} not found")

        try:
            result = await handler(request)
        except Exception as e:
            status = self.error_status(e)
            if status >= 500:
                logger.exception(f"Handler error on {request.method} {request.path}: {e}")
            return error_response(status, str(e))

        if isinstance(result, Response):
            return result
        if isinstance(result, dict):
            return Response(
                status=200,
                headers={'content-type': 'application/json'},
                body=json.dumps(result, ensure_ascii=False).encode()
            )
        if isinstance(result, str):
            return Response(status=200, body=result.encode())
        if isinstance(result, bytes):
            return Response(status=200, body=result)

        logger.error(f"Handler for {request.path} returned {type(result).__name__}")
        return error_response(500, "Internal Server Error")

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle a single client connection with keep-alive"""
        peer = writer.get_extra_info('peername')

        try:
            while True:
                request = await self.parse_request(reader)
                if request is None:
                    break

                start_time = time.perf_counter()
                response = await self.handle_request(request)

                writer.write(self.build_response(response))
                await writer.drain()

                elapsed_us = int((time.perf_counter() - start_time) * 1_000_000)
                logger.info(f"{response.status} {request.method:<6} {elapsed_us:6d}us {request.path}")

                if request.headers.get('connection', '').lower() == 'close':
                    break

        except ConnectionResetError:
            logger.debug(f"Connection reset by {peer}")
        except Exception as e:
            logger.error(f"Connection error from {peer}: {e}")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError) as e:
                logger.debug(f"Error closing connection to {peer}: {e}")

    async def start(self):
        """Start the HTTP server"""
        server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port
        )

        addr = server.sockets[0].getsockname()
        logger.info(f'KV lists HTTP server running on http://{addr[0]}:{addr[1]}')

        try:
            async with server:
                await server.serve_forever()
        except asyncio.CancelledError:
            logger.info("Server shutdown requested")
        finally:
            await self.shutdown(server)

    async def shutdown(self, server):
        """Gracefully shutdown the server"""
        logger.info("Shutting down server...")
        server.close()
        await server.wait_closed()
        logger.info("Server shutdown complete")
