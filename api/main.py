import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from loguru import logger

from lbp_texture.config import (
    DEFAULT_NUM_CLASSES,
    DEFAULT_POINTS,
    DEFAULT_RADIUS,
    DEFAULT_STRIDE,
    ClassificationConfig,
)
from lbp_texture.errors import ConfigurationError, DecodeFailure, DegenerateHistogramError, EmptyTrainingIndexError
from lbp_texture.features.lbp_extractor import LBPExtractor
from lbp_texture.pipeline.classifier import LBPClassifier
from lbp_texture.preprocessing.dataset import load_dataset
from lbp_texture.preprocessing.preprocess import decode_grayscale


def config_from_env():
    return ClassificationConfig(
        points=int(os.environ.get("LBP_POINTS", DEFAULT_POINTS)),
        radius=float(os.environ.get("LBP_RADIUS", DEFAULT_RADIUS)),
        num_classes=int(os.environ.get("LBP_CLASSES", DEFAULT_NUM_CLASSES)),
        stride=int(os.environ.get("LBP_STRIDE", DEFAULT_STRIDE)),
    )


def create_app(index=None, config=None):
    """
    Build the classification service.

    With no injected index, the service trains on startup from the list file
    named by LBP_TRAIN_LIST (if set) and otherwise stays untrained.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.index is None:
            train_list = os.environ.get("LBP_TRAIN_LIST")
            if train_list:
                logger.info(f"Training from {train_list}...")
                samples, _ = load_dataset(train_list)
                app.state.index = LBPClassifier(app.state.config).train(samples)
            else:
                logger.warning("LBP_TRAIN_LIST not set, service starts untrained")
        yield
        app.state.index = None

    config = config or config_from_env()
    if index is not None and index.n_bins != config.n_bins:
        raise ConfigurationError(
            f"Training index has {index.n_bins} bins but points={config.points} needs {config.n_bins}"
        )

    app = FastAPI(title="LBP Texture Classification API", lifespan=lifespan)
    app.state.config = config
    app.state.index = index

    @app.get("/")
    def read_root(request: Request):
        index = request.app.state.index
        return {
            "message": "LBP Texture Classification API is Ready",
            "trained": index is not None and len(index) > 0,
            "training_size": 0 if index is None else len(index),
        }

    @app.post("/classify")
    async def classify_image(request: Request, file: UploadFile = File(...)):
        """
        Predicts the texture class of the uploaded image by nearest neighbour.
        """
        index = request.app.state.index
        if index is None or len(index) == 0:
            raise HTTPException(status_code=503, detail="Classifier is not trained")

        contents = await file.read()
        try:
            image = decode_grayscale(contents, name=file.filename or "<upload>")
        except DecodeFailure as e:
            raise HTTPException(status_code=400, detail=f"Could not decode image: {e}")

        extractor = LBPExtractor(request.app.state.config)
        try:
            descriptor = extractor.extract(image)
            match, label, distance = index.query(descriptor)
        except DegenerateHistogramError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except EmptyTrainingIndexError as e:
            raise HTTPException(status_code=503, detail=str(e))

        return {
            "label": int(label),
            "index": int(match),
            "distance": float(distance),
            "path": index.paths[match],
        }

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
