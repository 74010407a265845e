# main.py
import argparse
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from residency_vote.config import (
    ENABLE_DEV_CHAIN,
    LOG_LEVEL,
    NODE_URL,
    PORT,
    PROOF_PRIMITIVE,
    PUBLIC_KEY_PATH,
    SECRET_KEY_PATH,
)
from residency_vote.exceptions import InvalidProofs, NodeAccessError, NotAllowed, ProofError, StatementNotAllowed
from residency_vote.node_client import NodeClient
from residency_vote.primitives import load_primitive
from residency_vote.routes.prove_routes import router as prove_router
from residency_vote.security import generate_keypair, load_signing_key
from residency_vote.verification import Server

logging.basicConfig(
    level=LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Status code for each verifier error; anything else is an internal error.
PROOF_ERROR_STATUS = {
    NotAllowed: 400,
    InvalidProofs: 400,
    StatementNotAllowed: 400,
    NodeAccessError: 500,
}


def error_reply(message: str, code: int) -> JSONResponse:
    return JSONResponse(status_code=code, content={"message": message, "code": code})


def load_server(node_url: str, secret_key_path: str, public_key_path: str, proof_primitive: str) -> Server:
    """Everything the request handlers share. Loaded once, read-only afterwards."""
    node_client = NodeClient(node_url)
    global_context = node_client.get_cryptographic_parameters()
    logger.debug("Acquired data from the node.")
    signing_key = load_signing_key(Path(secret_key_path), Path(public_key_path))
    primitive = load_primitive(proof_primitive)
    return Server(
        signing_key=signing_key,
        global_context=global_context,
        node_client=node_client,
        primitive=primitive,
    )


def create_app(
    node_url: str = NODE_URL,
    secret_key_path: str = SECRET_KEY_PATH,
    public_key_path: str = PUBLIC_KEY_PATH,
    proof_primitive: str = PROOF_PRIMITIVE,
    enable_dev_chain: bool = ENABLE_DEV_CHAIN,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.server = load_server(node_url, secret_key_path, public_key_path, proof_primitive)
        if enable_dev_chain:
            from residency_vote.chain_host import ContractHost
            from residency_vote.storage import create_store
            app.state.host = ContractHost(create_store())
            logger.info("Development chain enabled")
        yield

    app = FastAPI(title="Residency Vote Verifier", lifespan=lifespan)

    allowed_methods = ["POST", "GET"] if enable_dev_chain else ["POST"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=allowed_methods,
        allow_headers=["Content-Type"],
    )

    app.include_router(prove_router)
    if enable_dev_chain:
        from residency_vote.routes.election_routes import router as election_router
        from residency_vote.routes.vote_routes import vote_router
        app.include_router(election_router)
        app.include_router(vote_router)

    @app.exception_handler(ProofError)
    async def handle_proof_error(request: Request, exc: ProofError):
        code = PROOF_ERROR_STATUS.get(type(exc))
        if code is None:
            return error_reply("Internal error.", 500)
        return error_reply(exc.message, code)

    @app.exception_handler(RequestValidationError)
    async def handle_malformed_body(request: Request, exc: RequestValidationError):
        logger.debug(f"Malformed body: {exc.errors()}")
        return error_reply("Malformed body.", 400)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return error_reply("Not found.", 404)
        return error_reply(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def handle_internal_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        return error_reply("Internal error.", 500)

    return app


app = create_app()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Verifier for residency-gated voting")
    subcommands = parser.add_subparsers(dest="command", required=True)

    serve = subcommands.add_parser("serve", help="Run the verifier HTTP server")
    serve.add_argument("--node", default=NODE_URL, help="JSON interface of the node.")
    serve.add_argument("--port", type=int, default=PORT, help="Port on which the server will listen on.")
    serve.add_argument("--log-level", default=LOG_LEVEL, help="Maximum log level.")
    serve.add_argument("--public-key", default=PUBLIC_KEY_PATH, help="Location of the public key in binary format.")
    serve.add_argument("--secret-key", default=SECRET_KEY_PATH, help="Location of the secret key in binary format.")
    serve.add_argument("--proof-primitive", default=PROOF_PRIMITIVE,
                       help="Proof verification backend as 'package.module:attribute'.")
    serve.add_argument("--dev-chain", action="store_true", default=ENABLE_DEV_CHAIN,
                       help="Also serve a local voting contract for development.")

    keygen = subcommands.add_parser("keygen", help="Generate a verifier key pair")
    keygen.add_argument("--out", default=".", help="Directory for secret_key.bin and public_key.bin.")

    args = parser.parse_args(argv)

    if args.command == "keygen":
        secret_path, public_path = generate_keypair(Path(args.out))
        print(f"Wrote {secret_path} and {public_path}")
        return

    logging.getLogger().setLevel(args.log_level.upper())
    server_app = create_app(
        node_url=args.node,
        secret_key_path=args.secret_key,
        public_key_path=args.public_key,
        proof_primitive=args.proof_primitive,
        enable_dev_chain=args.dev_chain,
    )
    logger.info(f"Starting up HTTP server. Listening on port {args.port}.")
    uvicorn.run(server_app, host="0.0.0.0", port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
