"""
OCRS API Server - Command Line Entry Point

Supports running with: python -m ocrs_api
"""

import argparse
import os


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="OCRS API Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Server settings
    server_group = parser.add_argument_group("Server Settings")
    server_group.add_argument(
        "--host",
        type=str,
        default=os.getenv("OCRS_API_HOST", "0.0.0.0"),
        help="Server host address",
    )
    server_group.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("OCRS_API_PORT", "6622")),
        help="Server port",
    )
    server_group.add_argument(
        "--log-level",
        type=str,
        default=os.getenv("OCRS_API_LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    # Model settings
    model_group = parser.add_argument_group("Model Settings")
    model_group.add_argument(
        "--detection-model-url",
        type=str,
        default=os.getenv(
            "OCRS_API_DETECTION_MODEL_URL",
            "https://ocrs-models.s3-accelerate.amazonaws.com/text-detection.rten",
        ),
        help="URL of the text detection model",
    )
    model_group.add_argument(
        "--recognition-model-url",
        type=str,
        default=os.getenv(
            "OCRS_API_RECOGNITION_MODEL_URL",
            "https://ocrs-models.s3-accelerate.amazonaws.com/text-recognition.rten",
        ),
        help="URL of the text recognition model",
    )

    # Engine settings
    engine_group = parser.add_argument_group("Engine Settings")
    engine_group.add_argument(
        "--engine-backend",
        type=str,
        default=os.getenv("OCRS_API_ENGINE_BACKEND", "ocrs:OcrBackend"),
        help="Import path of the OCR engine backend (module:attribute)",
    )
    engine_group.add_argument(
        "--serialize-inference",
        action="store_true",
        help="Run inference calls one at a time",
    )

    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_args()

    # Set environment variables from arguments
    env_mapping = {
        "OCRS_API_HOST": args.host,
        "OCRS_API_PORT": str(args.port),
        "OCRS_API_LOG_LEVEL": args.log_level,
        "OCRS_API_DETECTION_MODEL_URL": args.detection_model_url,
        "OCRS_API_RECOGNITION_MODEL_URL": args.recognition_model_url,
        "OCRS_API_ENGINE_BACKEND": args.engine_backend,
    }
    if args.serialize_inference:
        env_mapping["OCRS_API_SERIALIZE_INFERENCE"] = "true"

    for key, value in env_mapping.items():
        # Only set if not already in environment (preserves .env file values)
        if key not in os.environ:
            os.environ[key] = value

    # Import uvicorn here to avoid import issues
    import uvicorn

    print(f"""
╔══════════════════════════════════════════════════════════════╗
║           OCRS API Server                                    ║
╠══════════════════════════════════════════════════════════════╣
║  Backend:   {args.engine_backend:<48} ║
║  Host:      {args.host:<48} ║
║  Port:      {args.port:<48} ║
╚══════════════════════════════════════════════════════════════╝
    """)

    uvicorn.run(
        "ocrs_api.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        lifespan="on",
        access_log=False,
    )


if __name__ == "__main__":
    main()
