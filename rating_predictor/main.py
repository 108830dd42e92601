from pathlib import Path
from typing import Optional

from fastapi import BackgroundTasks, FastAPI, File, Query, Request, UploadFile
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel
from starlette import status
from starlette.responses import JSONResponse

from rating_predictor.config import Settings
from rating_predictor.data.loader import load_dataset, load_raw_text
from rating_predictor.errors import (DataUnavailable, InvalidSelection,
                                     ModelNotReady)
from rating_predictor.logger import logger
from rating_predictor.ml.background import background_full_training
from rating_predictor.models import Dataset
from rating_predictor.pipeline import StatusReporter, predict_for_display
from rating_predictor.search.fuzzy_search import get_searcher
from rating_predictor.utils import timed

app = FastAPI()

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


class PredictParams(BaseModel):
    user_id: Optional[int] = None
    movie_id: Optional[int] = None


def _use_dataset(state, dataset: Dataset) -> None:
    state.dataset = dataset
    state.searcher = get_searcher(dataset.movies)
    state.recommender = None


def _error(msg: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": msg}, status_code=status_code)


def _model_state(state) -> str:
    if state.recommender is None:
        return "untrained"
    return state.recommender.state.value


@app.on_event("startup")
@timed
async def startup_event():
    state = app.state
    state.settings = Settings.from_env()
    state.reporter = StatusReporter()
    state.dataset = None
    state.searcher = None
    state.recommender = None
    state.busy = False

    if state.settings.data_source == "upload":
        state.reporter.update("Please load your MovieLens data files to begin.", 0)
        return

    state.reporter.update("Loading data...", 10)
    try:
        raw = await load_raw_text(state.settings)
        state.reporter.update("Parsing data...", 30)
        _use_dataset(state, load_dataset(raw))
    except DataUnavailable as exc:
        logger.error(f"loading data failed: {exc}")
        state.reporter.update(f"Error: {exc}", 0)
        return
    state.reporter.update("Data loaded!", 50)

    state.busy = True
    await background_full_training(state)


@app.get("/status")
async def get_status(request: Request) -> JSONResponse:
    state = request.app.state
    dataset = state.dataset
    return JSONResponse(
        {
            **state.reporter.as_dict(),
            "state": _model_state(state),
            "origin": dataset.origin if dataset is not None else None,
        }
    )


@app.get("/users")
async def get_users(request: Request) -> JSONResponse:
    dataset = request.app.state.dataset
    return JSONResponse(dataset.user_ids() if dataset is not None else [])


@app.get("/movies")
async def get_movies(request: Request) -> JSONResponse:
    dataset = request.app.state.dataset
    if dataset is None:
        return JSONResponse([])
    return JSONResponse(
        [{"id": m.id, "title": m.title, "year": m.year} for m in dataset.movies]
    )


@app.get("/search")
async def search(request: Request, query: str, limit: int = Query(ge=1, le=50, default=5)):
    searcher = request.app.state.searcher
    if searcher is None:
        return _error("no movies loaded yet", status.HTTP_409_CONFLICT)
    if not query.strip():
        return _error("search query is empty", status.HTTP_400_BAD_REQUEST)
    movies = searcher(query, limit=limit)
    return JSONResponse([{"id": movie_id, "title": title} for movie_id, title in movies])


@app.post("/load")
@timed
async def load_files(
    request: Request,
    bg_tasks: BackgroundTasks,
    movies_file: Optional[UploadFile] = File(None),
    ratings_file: Optional[UploadFile] = File(None),
) -> JSONResponse:
    state = request.app.state
    if state.busy:
        return _error("training is in progress, try again when it finishes", status.HTTP_409_CONFLICT)

    # claimed before the first await, released unless training gets scheduled
    state.busy = True
    scheduled = False
    try:
        state.reporter.update("Reading files...", 10)
        movies_content = await movies_file.read() if movies_file is not None else None
        ratings_content = await ratings_file.read() if ratings_file is not None else None
        try:
            raw = await load_raw_text(state.settings, uploads=(movies_content, ratings_content))
            state.reporter.update("Parsing data...", 30)
            dataset = load_dataset(raw)
        except DataUnavailable as exc:
            state.reporter.update(f"Error: {exc}", 0)
            return _error(str(exc), status.HTTP_400_BAD_REQUEST)

        _use_dataset(state, dataset)
        state.reporter.update("Data loaded!", 50)
        bg_tasks.add_task(background_full_training, state)
        scheduled = True
    finally:
        if not scheduled:
            state.busy = False
    return JSONResponse(
        {
            "users": dataset.num_users,
            "movies": dataset.num_movies,
            "ratings": len(dataset.ratings),
        },
        status_code=status.HTTP_202_ACCEPTED,
    )


@app.post("/train")
async def train(request: Request, bg_tasks: BackgroundTasks) -> JSONResponse:
    state = request.app.state
    if state.dataset is None:
        return _error("no data loaded yet", status.HTTP_409_CONFLICT)
    if state.busy:
        return _error("training is in progress, try again when it finishes", status.HTTP_409_CONFLICT)

    state.busy = True
    bg_tasks.add_task(background_full_training, state, retrain=True)
    return JSONResponse({"status": "training"}, status_code=status.HTTP_202_ACCEPTED)


def _predict(state, user_id: Optional[int], movie_id: Optional[int]):
    if state.dataset is None or state.recommender is None:
        raise ModelNotReady("no model available yet, please load data and wait for training")
    return predict_for_display(state.recommender, state.dataset, user_id, movie_id)


@app.post("/predict")
async def predict(request: Request, body: PredictParams) -> JSONResponse:
    try:
        prediction = _predict(request.app.state, body.user_id, body.movie_id)
    except ModelNotReady as exc:
        return _error(str(exc), status.HTTP_409_CONFLICT)
    except InvalidSelection as exc:
        return _error(str(exc), status.HTTP_400_BAD_REQUEST)
    logger.info(
        f"predicted {prediction.rating:.2f} for user {prediction.user_id} - movie {prediction.movie_id}"
    )
    return JSONResponse(prediction._asdict())


def _page_context(request: Request, **extra) -> dict:
    state = request.app.state
    dataset = state.dataset
    return {
        "status": state.reporter.as_dict(),
        "model_state": _model_state(state),
        "users": dataset.user_ids() if dataset is not None else [],
        "movies": dataset.movies if dataset is not None else [],
        **extra,
    }


@app.get("/")
async def landing(request: Request):
    return templates.TemplateResponse(request, "index.html", _page_context(request))


@app.get("/predict_html")
async def predict_html(
    request: Request,
    user_id: Optional[int] = None,
    movie_id: Optional[int] = None,
):
    prediction, error = None, None
    try:
        prediction = _predict(request.app.state, user_id, movie_id)
    except (ModelNotReady, InvalidSelection) as exc:
        error = str(exc)
    return templates.TemplateResponse(
        request,
        "index.html",
        _page_context(
            request,
            prediction=prediction,
            error=error,
            selected_user=user_id,
            selected_movie=movie_id,
        ),
    )
