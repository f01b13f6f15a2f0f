"""
Cookbook Backend - FastAPI Application
Main entry point for the recipe book API
"""

import logging
from functools import lru_cache
from typing import Callable, Optional

from fastapi import Depends, FastAPI, File, Header, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
from supabase import Client

from cookbook.config import CORS_ORIGINS, RECIPE_CATEGORIES, get_supabase_client
from cookbook.core.errors import (
    CookbookError,
    EmptyInputError,
    MalformedResponseError,
    NotAuthenticatedError,
    PersistenceError,
    UpstreamError,
)
from cookbook.core.keywords import extract_keywords
from cookbook.core.llm import call_llm
from cookbook.core.models import ALL_CATEGORIES, IngredientGroup, Recipe
from cookbook.core.ocr import recognize_image
from cookbook.core.parser import normalize, normalize_images
from cookbook.core.repository import RecipeRepository
from cookbook.core.search import apply_filters, search_by_keywords
from cookbook.core.session import Session, session_from_token

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("cookbook")


# Initialize FastAPI app
app = FastAPI(
    title="Cookbook API",
    description="Recipe capture, normalization and recipe book backend",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response Models
class TextRequest(BaseModel):
    text: str = ""


class SearchRequest(BaseModel):
    searchTerm: str = ""


class IngredientGroupModel(BaseModel):
    name: str
    ingredients: list[str] = []


class RecipeModel(BaseModel):
    recipeName: str
    categories: list[str] = []
    ingredientGroups: list[IngredientGroupModel] = []
    instructions: list[str] = []

    def to_recipe(self) -> Recipe:
        return Recipe(
            name=self.recipeName,
            categories=list(self.categories),
            ingredient_groups=[
                IngredientGroup(name=g.name, ingredients=list(g.ingredients))
                for g in self.ingredientGroups
            ],
            instructions=list(self.instructions)
        )


class KeywordsResponse(BaseModel):
    keywords: list[str]


# Dependencies
@lru_cache(maxsize=1)
def supabase_client() -> Client:
    """One shared client per process; a config error is not cached"""
    return get_supabase_client()


def get_supabase() -> Client:
    try:
        return supabase_client()
    except RuntimeError as e:
        logger.error("Recipe store unavailable: %s", e)
        raise HTTPException(status_code=503, detail={
            "error": "The recipe store is not configured",
            "details": str(e)
        })


def get_session(
    authorization: Optional[str] = Header(default=None),
    client: Client = Depends(get_supabase)
) -> Session:
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
    return session_from_token(client, token)


def get_repository(
    session: Session = Depends(get_session),
    client: Client = Depends(get_supabase)
) -> RecipeRepository:
    return RecipeRepository(client, session)


def get_generator() -> Callable[[str], str]:
    return call_llm


def get_recognizer() -> Callable:
    return recognize_image


def to_http_error(error: CookbookError) -> HTTPException:
    """Translate a core error into an HTTP error naming what failed"""
    if isinstance(error, EmptyInputError):
        return HTTPException(status_code=400, detail={"error": str(error)})
    if isinstance(error, NotAuthenticatedError):
        return HTTPException(status_code=401, detail={"error": str(error)})
    if isinstance(error, MalformedResponseError):
        return HTTPException(status_code=502, detail={
            "error": "Failed to read the AI response",
            "details": str(error),
            "stage": error.stage,
            "rawResponse": error.raw_payload
        })
    if isinstance(error, UpstreamError):
        return HTTPException(status_code=503, detail={
            "error": "The AI service is unavailable",
            "details": str(error)
        })
    if isinstance(error, PersistenceError):
        return HTTPException(status_code=500, detail={
            "error": "Failed to access the recipe store",
            "details": str(error)
        })
    return HTTPException(status_code=500, detail={"error": str(error)})


# API Endpoints
@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Cookbook API is running",
        "version": "1.0.0",
        "categories": RECIPE_CATEGORIES
    }


@app.post("/parse")
def parse_recipe(
    request: TextRequest,
    generate: Callable[[str], str] = Depends(get_generator)
):
    """Turn pasted recipe text into a structured recipe"""
    try:
        recipe = normalize(request.text, generate=generate)
    except CookbookError as e:
        logger.error("Recipe parsing failed: %s", e)
        raise to_http_error(e)
    return recipe.to_dict()


@app.post("/parse/images")
def parse_recipe_images(
    files: list[UploadFile] = File(...),
    generate: Callable[[str], str] = Depends(get_generator),
    recognize: Callable = Depends(get_recognizer)
):
    """OCR recipe photos in upload order, then structure the text"""
    try:
        recipe = normalize_images(
            [f.file for f in files],
            generate=generate,
            recognize=recognize
        )
    except CookbookError as e:
        logger.error("Photo recipe parsing failed: %s", e)
        raise to_http_error(e)
    return recipe.to_dict()


@app.post("/keywords", response_model=KeywordsResponse)
def keywords(
    request: TextRequest,
    generate: Callable[[str], str] = Depends(get_generator)
):
    """Extract search keywords from a natural-language query"""
    try:
        return KeywordsResponse(keywords=extract_keywords(request.text, generate=generate))
    except CookbookError as e:
        logger.error("Keyword extraction failed: %s", e)
        raise to_http_error(e)


@app.get("/recipes")
def list_recipes(
    category: str = ALL_CATEGORIES,
    letter: str = "",
    repository: RecipeRepository = Depends(get_repository)
):
    """The user's recipe book, newest first, optionally filtered"""
    try:
        recipes = repository.list()
    except CookbookError as e:
        raise to_http_error(e)
    return [r.to_dict() for r in apply_filters(recipes, category=category, letter=letter)]


@app.post("/recipes", status_code=201)
def create_recipe(
    recipe: RecipeModel,
    repository: RecipeRepository = Depends(get_repository)
):
    try:
        created = repository.create(recipe.to_recipe())
    except CookbookError as e:
        raise to_http_error(e)
    return created.to_dict()


@app.post("/recipes/search")
def search_recipes(
    request: SearchRequest,
    repository: RecipeRepository = Depends(get_repository)
):
    """Server-side full-text search over the user's recipes"""
    try:
        if not request.searchTerm.strip():
            raise EmptyInputError("Search term is required")
        results = repository.search(request.searchTerm)
    except CookbookError as e:
        raise to_http_error(e)
    return [r.to_dict() for r in results]


@app.post("/recipes/ai-search")
def ai_search_recipes(
    request: TextRequest,
    repository: RecipeRepository = Depends(get_repository),
    generate: Callable[[str], str] = Depends(get_generator)
):
    """Extract keywords from a free-form query and match them locally"""
    try:
        recipes = repository.list()
        terms = extract_keywords(request.text, generate=generate)
    except CookbookError as e:
        logger.error("AI search failed: %s", e)
        raise to_http_error(e)
    return {
        "keywords": terms,
        "recipes": [r.to_dict() for r in search_by_keywords(recipes, terms)]
    }


@app.get("/recipes/{recipe_id}")
def get_recipe(recipe_id: str, repository: RecipeRepository = Depends(get_repository)):
    try:
        recipe = repository.get(recipe_id)
    except CookbookError as e:
        raise to_http_error(e)
    if not recipe:
        raise HTTPException(status_code=404, detail={"error": "Recipe not found"})
    return recipe.to_dict()


@app.get("/recipes/{recipe_id}/print", response_class=PlainTextResponse)
def print_recipe(recipe_id: str, repository: RecipeRepository = Depends(get_repository)):
    """Plain-text print view of one recipe"""
    try:
        recipe = repository.get(recipe_id)
    except CookbookError as e:
        raise to_http_error(e)
    if not recipe:
        raise HTTPException(status_code=404, detail={"error": "Recipe not found"})
    return recipe.format_for_print()


@app.put("/recipes/{recipe_id}")
def update_recipe(
    recipe_id: str,
    recipe: RecipeModel,
    repository: RecipeRepository = Depends(get_repository)
):
    try:
        updated = repository.update(recipe_id, recipe.to_recipe())
    except CookbookError as e:
        raise to_http_error(e)
    return updated.to_dict()


@app.delete("/recipes/{recipe_id}")
def delete_recipe(recipe_id: str, repository: RecipeRepository = Depends(get_repository)):
    try:
        deleted = repository.delete(recipe_id)
    except CookbookError as e:
        raise to_http_error(e)
    if not deleted:
        raise HTTPException(status_code=404, detail={"error": "Recipe not found"})
    return {"success": True}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
