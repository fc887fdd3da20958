import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from wordgrid.settings import settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger("wordgrid")


def create_app(dictionary=None) -> FastAPI:
    """Build the app. ``dictionary`` replaces the one built from settings (tests)."""
    from contextlib import asynccontextmanager

    from wordgrid.admin import AdminWords
    from wordgrid.dictionary import DictionaryLoadError, WordDictionary
    from wordgrid.solver import SearchEngine

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        word_dict = dictionary if dictionary is not None else WordDictionary.from_settings(settings)
        application.state.engine = SearchEngine(word_dict, settings.MIN_WORD_LENGTH)
        application.state.admin_words = AdminWords()

        try:
            await application.state.engine.ensure_trie()
        except DictionaryLoadError as e:
            logger.warning("Dictionary unavailable at startup, retrying on first request: %s", e)

        yield

    application = FastAPI(title="Word Grid", lifespan=lifespan)

    @application.get("/health")
    async def health(request: Request):
        engine = request.app.state.engine
        stats = engine.dictionary.stats()
        return {
            "status": "ok",
            "dictionary_loaded": stats["is_loaded"],
            "word_count": stats["word_count"],
            "cached_results": engine.cache_size(),
        }

    @application.get("/grid")
    async def grid(request: Request, seed: str = "", min_word_length: int | None = None):
        from wordgrid.grid import generate_validated_grid
        from wordgrid.metrics import GridMetrics
        from wordgrid.rng import generate_seed_code

        engine = request.app.state.engine
        seed = seed.strip().lower() or generate_seed_code()
        if min_word_length is not None and min_word_length < 1:
            raise HTTPException(400, "min_word_length must be positive")

        metrics = GridMetrics(seed)
        try:
            with metrics.stage("dictionary"):
                await engine.ensure_trie()
        except DictionaryLoadError as e:
            raise HTTPException(503, f"Dictionary unavailable: {e}")

        with metrics.generation(engine):
            board, result = await generate_validated_grid(
                seed,
                engine,
                min_vowels=settings.MIN_VOWELS,
                max_vowels=settings.MAX_VOWELS,
                min_longest_length=settings.MIN_LONGEST_LENGTH,
                max_attempts=settings.MAX_GENERATION_ATTEMPTS,
                min_word_length=min_word_length,
            )
        metrics.record_result(result)
        metrics.log()

        board_str = " / ".join(" ".join(row) for row in board)
        logger.info("Seed %r board: %s", seed, board_str)
        if settings.DEBUG:
            logger.info("Words for %r: %s", seed, ", ".join(result.all_words))

        return JSONResponse({
            "seed": seed,
            "grid": board,
            "solver": result.to_dict(settings.MAX_RESULTS),
            "processing_time": metrics.total_ms,
            "stage_timings": metrics.summary(),
            "solved_candidates": metrics.solved_candidates,
        })

    @application.post("/validate")
    async def validate(request: Request):
        from wordgrid.admin import is_word_valid
        from wordgrid.grid import is_valid_path, word_from_path

        body = await request.json()
        if not isinstance(body, dict):
            raise HTTPException(400, "Expected {word: ..., path: ..., grid: ...}")
        word = body.get("word")
        if not isinstance(word, str):
            raise HTTPException(400, "'word' must be a string")

        engine = request.app.state.engine
        valid = is_word_valid(word, engine.dictionary, request.app.state.admin_words)
        response = {"word": word.lower(), "valid": valid}

        board, path = body.get("grid"), body.get("path")
        if board is not None and path is not None:
            if not (isinstance(board, list) and all(
                    isinstance(row, list) and all(isinstance(t, str) for t in row) for row in board)):
                raise HTTPException(400, "'grid' must be a list of rows of letter tokens")
            try:
                positions = [(int(r), int(c)) for r, c in path]
            except (TypeError, ValueError):
                raise HTTPException(400, "'path' must be a list of [row, col] pairs")

            path_ok = is_valid_path(board, positions) and word_from_path(board, positions).lower() == word.lower()
            response["path_valid"] = path_ok
            response["valid"] = valid and path_ok

        return JSONResponse(response)

    @application.get("/api/admin/words")
    async def api_get_admin_words(request: Request):
        return JSONResponse(request.app.state.admin_words.to_dict())

    @application.post("/api/admin/words")
    async def api_post_admin_words(request: Request):
        body = await request.json()
        if not isinstance(body, dict):
            raise HTTPException(400, "Expected {additions: [...], blocklist: [...]}")
        try:
            request.app.state.admin_words = AdminWords.from_dict(body)
        except (AttributeError, TypeError):
            raise HTTPException(400, "'additions' and 'blocklist' must be lists of words")
        logger.info("Admin words updated: %d additions, %d blocked",
                    len(request.app.state.admin_words.additions), len(request.app.state.admin_words.blocklist))
        return JSONResponse(request.app.state.admin_words.to_dict())

    @application.get("/api/settings")
    async def api_get_settings():
        from wordgrid.settings import get_editable_settings, EDITABLE_FIELDS
        values = get_editable_settings(settings)
        field_types = {k: v.__name__ for k, v in EDITABLE_FIELDS.items()}
        return JSONResponse({"settings": values, "field_types": field_types})

    @application.post("/api/settings")
    async def api_post_settings(request: Request):
        from wordgrid.settings import update_settings, get_editable_settings
        body = await request.json()
        if not isinstance(body, dict):
            raise HTTPException(400, "Expected an object of setting names to values")
        errors = update_settings(settings, **body)

        # Cached results may have been produced under the old limits
        engine = request.app.state.engine
        engine.min_word_length = settings.MIN_WORD_LENGTH
        engine.clear_cache()

        if errors:
            return JSONResponse({"updated": get_editable_settings(settings), "errors": errors}, status_code=400)
        logger.info("Settings updated: %s", body)
        return JSONResponse({"updated": get_editable_settings(settings)})

    @application.post("/api/cache/clear")
    async def api_clear_cache(request: Request):
        engine = request.app.state.engine
        cleared = engine.cache_size()
        engine.clear_cache()
        logger.info("Cleared %d cached solver results", cleared)
        return {"cleared": cleared}

    return application


app = create_app()
