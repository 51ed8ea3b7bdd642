"""Service layer: conversion engine, rate refresher, ledger and the converter context."""
