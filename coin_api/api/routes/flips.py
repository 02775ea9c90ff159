from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, PlainTextResponse

from coin_api.api import deps
from coin_api.api.responses import BAD_REQUEST
from coin_api.schemas.flip import CurrentCounts, FlipResult, FlipStats, RandomFlipResult
from coin_api.services.flips import FlipService, InvalidArgumentError, parse_times

router = APIRouter(tags=["flips"])


@router.get("/flip-coins", response_model=FlipResult, responses=BAD_REQUEST)
def flip_coins(
    times: str | None = Query(default=None),
    flips: FlipService = Depends(deps.get_flip_service),
):
    try:
        return flips.flip(parse_times(times))
    except InvalidArgumentError as exc:
        flips.record_invalid_request(times)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": exc.message}
        )


@router.get("/flip-random", response_model=RandomFlipResult)
def flip_random(flips: FlipService = Depends(deps.get_flip_service)):
    return flips.flip_random_batch()


@router.get("/reset-counters", response_class=PlainTextResponse)
def reset_counters(flips: FlipService = Depends(deps.get_flip_service)):
    flips.reset_counters()
    return "Counters have been reset."


@router.get("/current-counts", response_model=CurrentCounts)
def current_counts(flips: FlipService = Depends(deps.get_flip_service)):
    return flips.current_counts()


@router.get("/flip-stats", response_model=FlipStats)
def flip_stats(flips: FlipService = Depends(deps.get_flip_service)):
    return flips.stats()
