#!/usr/bin/env python3
"""
Realtime Chat Server - Main Entry Point

This is the main entry point for the server application.
It wires the session store, message ledger and presence counter into the
realtime gateway and serves it over WebSocket.
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Optional

import websockets
from websockets.exceptions import ConnectionClosed

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.errors import ProtocolError
from common.protocol_definitions import parse_action
from server.auth.session_store import SessionStore
from server.chat.chat_server import ChatServer
from server.chat.message_ledger import MessageLedger
from server.chat.presence import PresenceCounter
from server.utils.config import ServerConfig
from server.utils.logger import logger


class ChatBackendServer:
    """Main server class that owns the shared stores and the gateway."""

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        logger.set_logs_dir(self.config.logs_dir)

        # Shared state, constructed once and passed by reference
        self.sessions = SessionStore()
        self.ledger = MessageLedger(
            max_message_length=self.config.max_message_length,
            max_messages=self.config.max_messages
        )
        self.presence = PresenceCounter()
        self.chat_server = ChatServer(
            self.sessions,
            self.ledger,
            self.presence,
            require_auth_for_edits=self.config.require_auth_for_edits,
            token_max_age=self.config.token_max_age
        )

    async def handle_frame(self, conn_id: int, raw):
        """Parse one inbound frame and run it to completion."""
        try:
            action = parse_action(raw)
        except ProtocolError as e:
            logger.warning(f"Rejected frame from conn_id={conn_id}: {e.message}")
            await self.chat_server.send_message(conn_id, e.to_dict())
            return

        logger.debug(f"Received from conn_id={conn_id}: {type(action).__name__}")
        await self.chat_server.dispatch(conn_id, action)

    async def handle_client(self, websocket, path=None):
        """Handle individual client connection."""
        addr = getattr(websocket, 'remote_address', None)
        conn_id = await self.chat_server.connect(websocket, addr)

        try:
            async for raw in websocket:
                try:
                    await self.handle_frame(conn_id, raw)
                except Exception as e:
                    logger.log_error(f"frame from conn_id={conn_id}", e)

        except ConnectionClosed as e:
            logger.debug(f"Connection conn_id={conn_id} closed: {e}")
        except asyncio.CancelledError:
            logger.info(f"Connection cancelled for conn_id={conn_id}")
            raise
        finally:
            await self.chat_server.disconnect(conn_id)

    async def start(self):
        """Start the server."""
        server = await websockets.serve(
            self.handle_client,
            self.config.host,
            self.config.port,
            max_size=self.config.max_frame_size
        )

        addr = ', '.join(str(sock.getsockname()) for sock in server.sockets)
        logger.info(f"Server listening on {addr}")

        async with server:
            await server.wait_closed()


def build_arg_parser() -> argparse.ArgumentParser:
    defaults = ServerConfig.from_env()
    parser = argparse.ArgumentParser(description='Realtime Chat Server')
    parser.add_argument('--host', type=str, default=defaults.host,
                        help=f'Host to bind to (default: {defaults.host})')
    parser.add_argument('--port', type=int, default=defaults.port,
                        help=f'WebSocket port (default: {defaults.port})')
    parser.add_argument('--logs-dir', type=str, default=defaults.logs_dir,
                        help='Directory for the chat transcript')
    parser.add_argument('--require-auth-for-edits', action='store_true',
                        default=defaults.require_auth_for_edits,
                        help='Only let authors edit or delete their own messages')
    parser.add_argument('--max-messages', type=int, default=defaults.max_messages,
                        help='Keep only the newest N messages (default: unbounded)')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    return parser


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    if args.debug:
        logger.set_level(logging.DEBUG)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        logs_dir=args.logs_dir,
        require_auth_for_edits=args.require_auth_for_edits
    )
    config.max_messages = args.max_messages

    try:
        asyncio.run(ChatBackendServer(config).start())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except Exception as e:
        logger.log_error("server", e)
        raise


if __name__ == "__main__":
    main()
