import logging
import os
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import auth
import bookings
import payment_methods
import search_history
from database import Repository, build_repository
from errors import DuplicateEmailError, InvalidCredentialsError, NotFoundError, StorageUnavailableError
from schemas import (
    Booking,
    BookingCreate,
    Email,
    PaymentMethod,
    PaymentMethodCreate,
    PaymentMethodUpdate,
    Record,
    SearchHistoryItem,
    SearchQuery,
    User,
)

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

app = FastAPI(title="Airline Booking API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

repository = build_repository()


def get_repo() -> Repository:
    return repository


# --------- Models for requests/responses ---------
class RegisterRequest(Record):
    first_name: str
    last_name: str
    email: Email
    password: str


class SignInRequest(Record):
    email: str
    password: str


class BookingViews(Record):
    upcoming: List[Booking]
    past: List[Booking]
    check_in: List[Booking]


class RemovedResponse(Record):
    removed: bool


def unavailable(exc: StorageUnavailableError) -> HTTPException:
    return HTTPException(status_code=503, detail=str(exc))


# --------- Basic endpoints ---------
@app.get("/")
def root():
    return {"message": "Airline Booking API ready"}


@app.get("/test")
def test_storage(repo: Repository = Depends(get_repo)):
    response = {
        "backend": "✅ Running",
        "storage": "❌ Not Available",
        "storage_backend": os.getenv("STORAGE_BACKEND", "file"),
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
    }
    if repo.available:
        response["storage"] = f"✅ {type(repo.store).__name__}"
    return response


# --------- Auth ---------
@app.post("/api/auth/register", response_model=User)
async def register(req: RegisterRequest, repo: Repository = Depends(get_repo)):
    try:
        return await auth.register(repo, req.first_name, req.last_name, req.email, req.password)
    except DuplicateEmailError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageUnavailableError as e:
        raise unavailable(e)


@app.post("/api/auth/signin", response_model=User)
async def sign_in(req: SignInRequest, repo: Repository = Depends(get_repo)):
    try:
        return await auth.sign_in(repo, req.email, req.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except StorageUnavailableError as e:
        raise unavailable(e)


@app.get("/api/auth/me", response_model=Optional[User])
async def current_user(repo: Repository = Depends(get_repo)):
    return await auth.get_current_user(repo)


@app.post("/api/auth/signout", status_code=204)
async def sign_out(repo: Repository = Depends(get_repo)):
    await auth.sign_out(repo)


# --------- Bookings ---------
@app.get("/api/users/{user_id}/bookings", response_model=BookingViews)
async def list_bookings(user_id: str, repo: Repository = Depends(get_repo)):
    items = await bookings.get_user_bookings(repo, user_id)
    upcoming, past = bookings.split_bookings(items)
    return BookingViews(upcoming=upcoming, past=past, check_in=bookings.check_in_eligible(items))


@app.post("/api/bookings", response_model=Booking, status_code=201)
async def create_booking(req: BookingCreate, repo: Repository = Depends(get_repo)):
    try:
        return await bookings.create_booking(repo, req)
    except StorageUnavailableError as e:
        raise unavailable(e)


@app.get("/api/bookings/{booking_id}", response_model=Booking)
async def get_booking(booking_id: str, repo: Repository = Depends(get_repo)):
    booking = await bookings.get_booking(repo, booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


@app.post("/api/bookings/{booking_id}/cancel", response_model=Booking)
async def cancel_booking(booking_id: str, repo: Repository = Depends(get_repo)):
    try:
        return await bookings.cancel_booking(repo, booking_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageUnavailableError as e:
        raise unavailable(e)


# --------- Payment methods ---------
@app.get("/api/users/{user_id}/payment-methods", response_model=List[PaymentMethod])
async def list_payment_methods(user_id: str, repo: Repository = Depends(get_repo)):
    return await payment_methods.get_user_payment_methods(repo, user_id)


@app.post("/api/payment-methods", response_model=PaymentMethod, status_code=201)
async def add_payment_method(req: PaymentMethodCreate, repo: Repository = Depends(get_repo)):
    try:
        return await payment_methods.add_payment_method(repo, req)
    except StorageUnavailableError as e:
        raise unavailable(e)


@app.get("/api/payment-methods/{payment_method_id}", response_model=PaymentMethod)
async def get_payment_method(payment_method_id: str, repo: Repository = Depends(get_repo)):
    method = await payment_methods.get_payment_method(repo, payment_method_id)
    if method is None:
        raise HTTPException(status_code=404, detail="Payment method not found")
    return method


@app.patch("/api/payment-methods/{payment_method_id}", response_model=PaymentMethod)
async def update_payment_method(
    payment_method_id: str, req: PaymentMethodUpdate, repo: Repository = Depends(get_repo)
):
    method = await payment_methods.update_payment_method(repo, payment_method_id, req)
    if method is None:
        raise HTTPException(status_code=404, detail="Payment method not found")
    return method


@app.delete("/api/payment-methods/{payment_method_id}", response_model=RemovedResponse)
async def remove_payment_method(payment_method_id: str, repo: Repository = Depends(get_repo)):
    removed = await payment_methods.remove_payment_method(repo, payment_method_id)
    return RemovedResponse(removed=removed)


@app.post("/api/users/{user_id}/payment-methods/{payment_method_id}/default")
async def make_default_payment_method(user_id: str, payment_method_id: str, repo: Repository = Depends(get_repo)):
    if not await payment_methods.set_default_payment_method(repo, user_id, payment_method_id):
        raise HTTPException(status_code=404, detail="Payment method not found")
    return {"ok": True}


# --------- Search history ---------
@app.get("/api/users/{user_id}/searches", response_model=List[SearchHistoryItem])
async def list_searches(user_id: str, repo: Repository = Depends(get_repo)):
    return await search_history.get_search_history(repo, user_id)


@app.post("/api/users/{user_id}/searches", status_code=204)
async def save_search(user_id: str, req: SearchQuery, repo: Repository = Depends(get_repo)):
    await search_history.save_search_history(repo, user_id, req)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
